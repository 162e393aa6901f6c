# budgets/api/views.py

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from budgets.models import Budget
from budgets.serializers import BudgetSerializer, BudgetWriteSerializer
from budgets.services.budget_service import create_budget, update_budget
from orders.serializers import OrderSerializer
from permissions.roles import IsWorkflowUser
from workflow.api.errors import WorkflowErrorMixin
from workflow.api.responses import entity_response, list_response, transition_response
from workflow.api.serializers import (
    ERROR_RESPONSES,
    AvailableTransitionsSerializer,
    RejectRequestSerializer,
    StatusChangeRequestSerializer,
    TransitionReasonSerializer,
)
from workflow.services.conversion import ConversionWorkflow
from workflow.services.engine import WorkflowEngine
from workflow.services.exceptions import ValidationError
from workflow.services.repository import DjangoWorkflowRepository
from workflow.services.sanitizer import sanitize
from workflow.services.transition_table import KIND_BUDGET


class BudgetBaseView(WorkflowErrorMixin, GenericAPIView):
    permission_classes = [IsAuthenticated, IsWorkflowUser]
    serializer_class = BudgetSerializer
    queryset = Budget.objects.select_related("client", "center", "order")
    filterset_fields = ["status", "client", "center"]

    def validated(self, serializer_class):
        serializer = serializer_class(data=self.request.data)
        if not serializer.is_valid():
            raise ValidationError.from_serializer(serializer)
        return serializer.validated_data


class BudgetListCreateView(BudgetBaseView):
    @extend_schema(tags=["budgets"], responses=BudgetSerializer(many=True))
    def get(self, request):
        qs = self.filter_queryset(self.get_queryset())
        return list_response(BudgetSerializer, qs, self.principal())

    @extend_schema(
        tags=["budgets"],
        request=BudgetWriteSerializer,
        responses={201: BudgetSerializer, **ERROR_RESPONSES},
    )
    def post(self, request):
        principal = self.principal()
        budget = create_budget(request.data, principal)
        return entity_response(BudgetSerializer, budget, principal, status.HTTP_201_CREATED)


class BudgetDetailView(BudgetBaseView):
    @extend_schema(tags=["budgets"], responses={200: BudgetSerializer, **ERROR_RESPONSES})
    def get(self, request, pk):
        principal = self.principal()
        budget = DjangoWorkflowRepository().load(KIND_BUDGET, pk)
        return entity_response(BudgetSerializer, budget, principal)

    @extend_schema(
        tags=["budgets"],
        request=BudgetWriteSerializer,
        responses={200: BudgetSerializer, **ERROR_RESPONSES},
    )
    def patch(self, request, pk):
        principal = self.principal()
        budget = update_budget(pk, request.data, principal)
        return entity_response(BudgetSerializer, budget, principal)


class BudgetStatusView(BudgetBaseView):
    """
    GET:   statuses reachable from the current one (and those this role may pick)
    PATCH: {"status": ..., "reason": ...}
    """

    @extend_schema(tags=["budgets"], responses={200: AvailableTransitionsSerializer, **ERROR_RESPONSES})
    def get(self, request, pk):
        available = WorkflowEngine().available_transitions(KIND_BUDGET, pk, self.principal())
        return Response(available.as_dict(), status=status.HTTP_200_OK)

    @extend_schema(
        tags=["budgets"],
        request=StatusChangeRequestSerializer,
        responses={200: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    def patch(self, request, pk):
        principal = self.principal()
        data = self.validated(StatusChangeRequestSerializer)
        result = WorkflowEngine().transition(
            KIND_BUDGET,
            pk,
            data["status"],
            principal,
            reason=data.get("reason"),
        )
        return transition_response(BudgetSerializer, result, principal)


class BudgetTransitionActionView(BudgetBaseView):
    """
    Fixed-target wrappers over the status transition.
    """

    target_status = None

    def reason(self):
        return self.validated(TransitionReasonSerializer).get("reason")

    @extend_schema(
        tags=["budgets"],
        request=TransitionReasonSerializer,
        responses={200: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    def post(self, request, pk):
        principal = self.principal()
        result = WorkflowEngine().transition(
            KIND_BUDGET,
            pk,
            self.target_status,
            principal,
            reason=self.reason(),
        )
        return transition_response(BudgetSerializer, result, principal)


class BudgetSubmitView(BudgetTransitionActionView):
    target_status = Budget.STATUS_SUBMITTED


class BudgetApproveView(BudgetTransitionActionView):
    target_status = Budget.STATUS_APPROVED


class BudgetRejectView(BudgetTransitionActionView):
    target_status = Budget.STATUS_REJECTED

    def reason(self):
        return self.validated(RejectRequestSerializer)["reason"]

    @extend_schema(
        tags=["budgets"],
        request=RejectRequestSerializer,
        responses={200: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    def post(self, request, pk):
        return super().post(request, pk)


class BudgetConvertView(BudgetBaseView):
    @extend_schema(
        tags=["budgets"],
        request=None,
        responses={201: OpenApiTypes.OBJECT, **ERROR_RESPONSES},
    )
    def post(self, request, pk):
        principal = self.principal()
        result = ConversionWorkflow().convert(pk, principal)
        return Response(
            {
                "budget": sanitize(BudgetSerializer(result.budget).data, principal.role),
                "order": sanitize(OrderSerializer(result.order).data, principal.role),
            },
            status=status.HTTP_201_CREATED,
        )
