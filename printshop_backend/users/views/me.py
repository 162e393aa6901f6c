from drf_spectacular.utils import extend_schema
from rest_framework import serializers
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from workflow.api.errors import WorkflowErrorMixin

# ---------------------------
# SERIALIZER
# ---------------------------


class MeSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    email = serializers.EmailField()
    name = serializers.CharField()
    role = serializers.CharField()


# ---------------------------
# VIEW
# ---------------------------


class MeView(WorkflowErrorMixin, APIView):
    """
    Current principal as the workflow engine sees it.
    """

    permission_classes = [IsAuthenticated]
    serializer_class = MeSerializer

    @extend_schema(
        responses={200: MeSerializer},
        description="Get current authenticated principal (id, email, role)",
    )
    def get(self, request):
        principal = self.principal()

        return Response(
            {
                "id": principal.id,
                "email": principal.email,
                "name": request.user.name,
                "role": principal.role,
            }
        )
