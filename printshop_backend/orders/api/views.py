# orders/api/views.py

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from orders.models import Order
from orders.serializers import OrderSerializer, OrderWriteSerializer
from orders.services.order_service import create_direct_order, delete_order, update_order
from permissions.roles import IsWorkflowUser
from workflow.api.errors import WorkflowErrorMixin
from workflow.api.responses import entity_response, list_response, transition_response
from workflow.api.serializers import (
    ERROR_RESPONSES,
    AvailableTransitionsSerializer,
    StatusChangeRequestSerializer,
)
from workflow.services.engine import WorkflowEngine
from workflow.services.exceptions import ValidationError
from workflow.services.repository import DjangoWorkflowRepository
from workflow.services.transition_table import KIND_ORDER


class OrderBaseView(WorkflowErrorMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, IsWorkflowUser]
    serializer_class = OrderSerializer
    queryset = Order.objects.select_related("client", "center", "budget")
    filterset_fields = ["status", "order_type", "client", "center"]


class OrderListCreateView(OrderBaseView):
    @extend_schema(tags=["orders"], responses=OrderSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return list_response(OrderSerializer, qs, self.principal())

    @extend_schema(
        tags=["orders"],
        request=OrderWriteSerializer,
        responses={201: OrderSerializer, **ERROR_RESPONSES},
        description="Create a DIRECT_ORDER or RUSH_ORDER (moderator/admin).",
    )
    def post(self, request):
        principal = self.principal()
        order = create_direct_order(request.data, principal)
        return entity_response(OrderSerializer, order, principal, status.HTTP_201_CREATED)


class OrderDetailView(OrderBaseView):
    @extend_schema(tags=["orders"], responses={200: OrderSerializer, **ERROR_RESPONSES})
    def get(self, request, pk):
        principal = self.principal()
        order = DjangoWorkflowRepository().load(KIND_ORDER, pk)
        return entity_response(OrderSerializer, order, principal)

    @extend_schema(
        tags=["orders"],
        request=OrderWriteSerializer,
        responses={200: OrderSerializer, **ERROR_RESPONSES},
    )
    def patch(self, request, pk):
        principal = self.principal()
        order = update_order(pk, request.data, principal)
        return entity_response(OrderSerializer, order, principal)

    @extend_schema(tags=["orders"], responses={204: None, **ERROR_RESPONSES})
    def delete(self, request, pk):
        delete_order(pk, self.principal())
        return Response(status=status.HTTP_204_NO_CONTENT)


class OrderStatusView(OrderBaseView):
    """
    GET:   statuses reachable from the current one (and those this role may pick)
    PATCH: {"status": ..., "reason": ...}
    """

    @extend_schema(tags=["orders"], responses={200: AvailableTransitionsSerializer, **ERROR_RESPONSES})
    def get(self, request, pk):
        available = WorkflowEngine().available_transitions(KIND_ORDER, pk, self.principal())
        return Response(available.as_dict(), status=status.HTTP_200_OK)

    @extend_schema(
        tags=["orders"],
        request=StatusChangeRequestSerializer,
        responses={200: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    def patch(self, request, pk):
        principal = self.principal()
        serializer = StatusChangeRequestSerializer(data=request.data)
        if not serializer.is_valid():
            raise ValidationError.from_serializer(serializer)

        result = WorkflowEngine().transition(
            KIND_ORDER,
            pk,
            serializer.validated_data["status"],
            principal,
            reason=serializer.validated_data.get("reason"),
        )
        return transition_response(OrderSerializer, result, principal)
