# budgets/services/budget_service.py

"""
BUDGET CONTENT SERVICE

Creation and generic field edits. Status changes never happen here: they go
through workflow.services.engine (transition) or
workflow.services.conversion (APPROVED -> CONVERTED).
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from django.utils import timezone

from budgets.models import Budget
from budgets.serializers import BudgetWriteSerializer
from workflow.services import audit_trail
from workflow.services.exceptions import (
    ImmutableFieldError,
    InvalidStateError,
    ValidationError,
)
from workflow.services.payloads import require_object
from workflow.services.principal import Principal
from workflow.services.repository import DjangoWorkflowRepository
from workflow.services.transition_table import KIND_BUDGET

logger = logging.getLogger(__name__)


def create_budget(payload: Mapping[str, Any], principal: Principal) -> Budget:
    """
    Create a DRAFT budget. Any workflow role may draft.
    """
    payload = require_object(payload)
    requested_status = payload.get("status")
    if requested_status not in (None, "", Budget.STATUS_DRAFT):
        raise ValidationError(
            "New budgets always start in DRAFT",
            details={"status": [f"Cannot create a budget in {requested_status}"]},
        )

    serializer = BudgetWriteSerializer(data=payload)
    if not serializer.is_valid():
        raise ValidationError.from_serializer(serializer)

    repository = DjangoWorkflowRepository()
    budget = repository.create(
        KIND_BUDGET,
        {
            **serializer.validated_data,
            "status": Budget.STATUS_DRAFT,
            "created_by_id": principal.id,
        },
    )

    logger.info(
        "Budget created",
        extra={"budget_id": budget.pk, "user": principal.email},
    )
    return budget


def update_budget(budget_id, payload: Mapping[str, Any], principal: Principal) -> Budget:
    """
    Generic content edit, allowed only while DRAFT or REJECTED.

    - status in the payload must equal the stored one (ImmutableFieldError)
    - observacoes is the audit log and cannot be rewritten
    - preco_total is recomputed when tiragem or preco_unitario change
    """
    payload = require_object(payload)
    repository = DjangoWorkflowRepository()
    budget = repository.load(KIND_BUDGET, budget_id)

    if "status" in payload and payload["status"] != budget.status:
        raise ImmutableFieldError(
            "status",
            budget.status,
            payload["status"],
            message="Budget status changes must go through the status endpoint",
        )

    if "observacoes" in payload and payload["observacoes"] != budget.observacoes:
        raise ImmutableFieldError(
            "observacoes",
            budget.observacoes,
            payload["observacoes"],
            message="observacoes is append-only",
        )

    if not budget.is_editable:
        raise InvalidStateError(
            f"Budget cannot be edited in {budget.status}",
            details={
                "currentStatus": budget.status,
                "editableStatuses": sorted(Budget.EDITABLE_STATUSES),
            },
        )

    serializer = BudgetWriteSerializer(budget, data=payload, partial=True)
    if not serializer.is_valid():
        raise ValidationError.from_serializer(serializer)

    changes = dict(serializer.validated_data)
    changes.pop("observacoes", None)

    entry = audit_trail.format_update_entry("Budget", principal.email, timezone.now())
    changes["observacoes"] = audit_trail.append(budget.observacoes, entry)

    budget = repository.commit(
        KIND_BUDGET,
        budget.pk,
        changes,
        expected_prior_state=budget.status,
    )

    logger.info(
        "Budget updated",
        extra={"budget_id": budget.pk, "user": principal.email},
    )
    return budget
