# workflow/services/payloads.py

from __future__ import annotations

from typing import Any, Mapping

from workflow.services.exceptions import ValidationError


def require_object(payload: Any) -> Mapping[str, Any]:
    """
    Request bodies for create/update must be JSON objects (or form data).
    """
    if not isinstance(payload, Mapping):
        raise ValidationError(
            "Request body must be a JSON object",
            details={"non_field_errors": [f"Expected an object, got {type(payload).__name__}."]},
        )
    return payload
