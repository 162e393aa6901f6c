# workflow/api/responses.py

"""
Success payloads for workflow endpoints.

Every entity leaving the API passes through the sanitizer with the caller's
role; views never return serializer.data directly.
"""

from rest_framework import status
from rest_framework.response import Response

from workflow.services.sanitizer import sanitize, sanitize_many


def entity_response(serializer_class, entity, principal, http_status=status.HTTP_200_OK):
    return Response(
        sanitize(serializer_class(entity).data, principal.role),
        status=http_status,
    )


def list_response(serializer_class, queryset, principal):
    return Response(
        sanitize_many(serializer_class(queryset, many=True).data, principal.role),
        status=status.HTTP_200_OK,
    )


def transition_response(serializer_class, result, principal):
    payload = sanitize(serializer_class(result.entity).data, principal.role)
    payload["statusChange"] = result.status_change.as_dict()
    return Response(payload, status=status.HTTP_200_OK)
