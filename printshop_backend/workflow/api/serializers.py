# workflow/api/serializers.py

from rest_framework import serializers


class ReasonField(serializers.CharField):
    """CharField that refuses numbers instead of coercing them to text."""

    def to_internal_value(self, data):
        if not isinstance(data, str):
            self.fail("invalid")
        return super().to_internal_value(data)


class TransitionReasonSerializer(serializers.Serializer):
    reason = ReasonField(required=False, allow_blank=True, allow_null=True)


class StatusChangeRequestSerializer(TransitionReasonSerializer):
    status = serializers.CharField()


class RejectRequestSerializer(serializers.Serializer):
    reason = ReasonField()

    def validate_reason(self, value):
        if not value.strip():
            raise serializers.ValidationError("A reason is required to reject a budget.")
        return value.strip()


class AvailableTransitionsSerializer(serializers.Serializer):
    currentStatus = serializers.CharField()
    allowedTransitions = serializers.ListField(child=serializers.CharField())
    availableTransitions = serializers.ListField(child=serializers.CharField())


class ErrorBodySerializer(serializers.Serializer):
    code = serializers.CharField()
    message = serializers.CharField()
    details = serializers.DictField()


class ErrorResponseSerializer(serializers.Serializer):
    error = ErrorBodySerializer()


ERROR_RESPONSES = {
    400: ErrorResponseSerializer,
    403: ErrorResponseSerializer,
    404: ErrorResponseSerializer,
    409: ErrorResponseSerializer,
}
