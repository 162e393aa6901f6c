# workflow/services/repository.py

"""
WORKFLOW PERSISTENCE

The engine talks to storage only through WorkflowRepository:
- load(kind, id)
- commit(kind, id, mutation, expected_prior_state)   (compare-and-swap)
- create(kind, fields)
- atomic()                                           (transaction boundary)

DjangoWorkflowRepository is the ORM implementation. commit() is a single
UPDATE ... WHERE id = ? AND status = ? so two writers racing from the same
prior state cannot both win.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from budgets.models import Budget
from orders.models import Order
from workflow.services.exceptions import (
    ConflictError,
    NotFoundError,
    ValidationError,
)
from workflow.services.transition_table import KIND_BUDGET, KIND_ORDER


@dataclass(frozen=True)
class EntityBinding:
    """How one workflow kind maps onto its Django model."""

    model: type
    notes_field: str
    label: str
    # status -> DateTimeField stamped when entering that status
    state_timestamps: Mapping[str, str] = field(default_factory=dict)
    # status -> FK attname stamped with the acting principal's id
    state_actors: Mapping[str, str] = field(default_factory=dict)
    # status -> attnames that must be set before entering that status
    required_fields: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    select_related: tuple[str, ...] = ()


DEFAULT_BINDINGS = MappingProxyType(
    {
        KIND_BUDGET: EntityBinding(
            model=Budget,
            notes_field="observacoes",
            label="Budget",
            state_timestamps={
                Budget.STATUS_SUBMITTED: "submitted_at",
                Budget.STATUS_APPROVED: "approved_at",
                Budget.STATUS_REJECTED: "rejected_at",
                Budget.STATUS_CONVERTED: "converted_at",
            },
            state_actors={
                Budget.STATUS_APPROVED: "approved_by_id",
                Budget.STATUS_REJECTED: "rejected_by_id",
            },
            required_fields={
                Budget.STATUS_SUBMITTED: ("client_id", "center_id"),
            },
            select_related=("client", "center", "order"),
        ),
        KIND_ORDER: EntityBinding(
            model=Order,
            notes_field="obs_producao",
            label="Order",
            select_related=("client", "center", "budget"),
        ),
    }
)


class WorkflowRepository:
    """Storage port used by the engine and the conversion workflow."""

    def binding(self, kind: str) -> EntityBinding:
        raise NotImplementedError

    def load(self, kind: str, entity_id):
        raise NotImplementedError

    def commit(self, kind: str, entity_id, mutation: Mapping[str, Any], expected_prior_state: str):
        raise NotImplementedError

    def create(self, kind: str, fields: Mapping[str, Any]):
        raise NotImplementedError

    def exists(self, kind: str, **filters) -> bool:
        raise NotImplementedError

    def atomic(self):
        raise NotImplementedError


def _has_unique_violation(exc: DjangoValidationError) -> bool:
    if not hasattr(exc, "error_dict"):
        return False
    return any(
        error.code == "unique"
        for errors in exc.error_dict.values()
        for error in errors
    )


class DjangoWorkflowRepository(WorkflowRepository):
    def __init__(self, bindings: Mapping[str, EntityBinding] = DEFAULT_BINDINGS):
        self.bindings = bindings

    def binding(self, kind: str) -> EntityBinding:
        try:
            return self.bindings[kind]
        except KeyError:
            raise ValidationError(
                f"Unknown entity kind: {kind!r}",
                details={"kind": kind, "validKinds": sorted(self.bindings)},
            ) from None

    def _queryset(self, kind: str):
        binding = self.binding(kind)
        return binding.model.objects.select_related(*binding.select_related)

    def load(self, kind: str, entity_id):
        try:
            return self._queryset(kind).get(pk=entity_id)
        except (self.binding(kind).model.DoesNotExist, ValueError, TypeError):
            raise NotFoundError(kind, entity_id) from None

    def commit(self, kind: str, entity_id, mutation: Mapping[str, Any], expected_prior_state: str):
        binding = self.binding(kind)
        values = dict(mutation)
        values.setdefault("updated_at", timezone.now())

        try:
            with transaction.atomic():
                updated = binding.model.objects.filter(
                    pk=entity_id,
                    status=expected_prior_state,
                ).update(**values)
        except IntegrityError as exc:
            raise ConflictError(
                f"{binding.label} {entity_id} update violates a constraint",
                details={"id": entity_id, "reason": str(exc)},
            ) from exc

        if updated == 0:
            if not binding.model.objects.filter(pk=entity_id).exists():
                raise NotFoundError(kind, entity_id)
            raise ConflictError(
                f"{binding.label} {entity_id} was modified concurrently",
                details={"id": entity_id, "expectedStatus": expected_prior_state},
            )

        return self.load(kind, entity_id)

    def create(self, kind: str, fields: Mapping[str, Any]):
        binding = self.binding(kind)
        instance = binding.model(**fields)

        try:
            with transaction.atomic():
                instance.save()
        except DjangoValidationError as exc:
            if _has_unique_violation(exc):
                raise ConflictError(
                    f"{binding.label} conflicts with an existing record",
                    details=exc.message_dict,
                ) from exc
            raise ValidationError(
                f"Invalid {kind} data",
                details=getattr(exc, "message_dict", {"non_field_errors": exc.messages}),
            ) from exc
        except IntegrityError as exc:
            raise ConflictError(
                f"{binding.label} conflicts with an existing record",
                details={"reason": str(exc)},
            ) from exc

        return self.load(kind, instance.pk)

    def exists(self, kind: str, **filters) -> bool:
        return self.binding(kind).model.objects.filter(**filters).exists()

    def atomic(self):
        return transaction.atomic()
