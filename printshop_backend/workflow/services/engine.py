# workflow/services/engine.py

"""
WORKFLOW ENGINE

Single entrypoint for status changes of Budgets and Orders.

Flow of transition():
1. load the entity (NotFoundError)
2. TransitionGuard.check (SameStateError / InvalidTransitionError / PermissionError)
3. build the audit line
4. compare-and-swap commit of status + notes + stamps (ConflictError)
5. return the refreshed entity and a StatusChange record

Errors are raised to the caller untouched; nothing is retried.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from django.utils import timezone

from workflow.services import audit_trail
from workflow.services.exceptions import (
    InvalidStateError,
    ValidationError,
    WorkflowError,
)
from workflow.services.principal import Principal
from workflow.services.repository import DjangoWorkflowRepository, WorkflowRepository
from workflow.services.transition_guard import TransitionGuard
from workflow.services.transition_table import DEFAULT_TABLES, TransitionTable

logger = logging.getLogger("workflow")


@dataclass(frozen=True)
class StatusChange:
    from_status: str
    to_status: str
    changed_by: str
    changed_at: datetime
    reason: Optional[str] = None

    def as_dict(self) -> dict[str, Any]:
        return {
            "from": self.from_status,
            "to": self.to_status,
            "changedBy": self.changed_by,
            "changedAt": audit_trail.format_timestamp(self.changed_at),
            "reason": self.reason,
        }


@dataclass(frozen=True)
class TransitionResult:
    entity: Any
    status_change: StatusChange


@dataclass(frozen=True)
class AvailableTransitions:
    current_status: str
    allowed_transitions: list[str]
    available_transitions: list[str]

    def as_dict(self) -> dict[str, Any]:
        return {
            "currentStatus": self.current_status,
            "allowedTransitions": list(self.allowed_transitions),
            "availableTransitions": list(self.available_transitions),
        }


class WorkflowEngine:
    def __init__(
        self,
        repository: Optional[WorkflowRepository] = None,
        tables: Optional[Mapping[str, TransitionTable]] = None,
        clock: Callable[[], datetime] = timezone.now,
    ):
        self.repository = repository or DjangoWorkflowRepository()
        self.tables = tables or DEFAULT_TABLES
        self.clock = clock

    def table(self, kind: str) -> TransitionTable:
        try:
            return self.tables[kind]
        except KeyError:
            raise ValidationError(
                f"Unknown entity kind: {kind!r}",
                details={"kind": kind, "validKinds": sorted(self.tables)},
            ) from None

    def guard(self, kind: str) -> TransitionGuard:
        return TransitionGuard(self.table(kind))

    # ------------------------------------------------------------------
    # Transition
    # ------------------------------------------------------------------

    def transition(
        self,
        kind: str,
        entity_id,
        requested_status: str,
        principal: Principal,
        reason: Optional[str] = None,
    ) -> TransitionResult:
        if reason is not None and not isinstance(reason, str):
            raise ValidationError(
                "Transition reason must be a string",
                details={"reason": ["Not a valid string."]},
            )

        table = self.table(kind)
        guard = self.guard(kind)
        binding = self.repository.binding(kind)

        entity = self.repository.load(kind, entity_id)
        current = entity.status

        try:
            guard.check(current, requested_status, principal.role)
            self._check_not_compound(table, current, requested_status)
            self._check_required_fields(binding, entity, requested_status)
        except WorkflowError as exc:
            logger.warning(
                "Transition rejected",
                extra={
                    "kind": kind,
                    "entity_id": entity_id,
                    "from_status": current,
                    "to_status": requested_status,
                    "user": principal.email,
                    "role": principal.role,
                    "code": exc.code,
                },
            )
            raise

        reason = reason.strip() if reason and reason.strip() else None
        at = self.clock()
        entry = audit_trail.format_entry(current, requested_status, principal.email, reason, at)

        mutation: dict[str, Any] = {
            "status": requested_status,
            binding.notes_field: audit_trail.append(getattr(entity, binding.notes_field), entry),
        }
        stamp = binding.state_timestamps.get(requested_status)
        if stamp:
            mutation[stamp] = at
        actor = binding.state_actors.get(requested_status)
        if actor:
            mutation[actor] = principal.id

        try:
            with self.repository.atomic():
                updated = self.repository.commit(
                    kind,
                    entity_id,
                    mutation,
                    expected_prior_state=current,
                )
        except WorkflowError as exc:
            logger.warning(
                "Transition commit failed",
                extra={
                    "kind": kind,
                    "entity_id": entity_id,
                    "from_status": current,
                    "to_status": requested_status,
                    "code": exc.code,
                },
            )
            raise

        logger.info(
            "Status changed",
            extra={
                "kind": kind,
                "entity_id": entity_id,
                "from_status": current,
                "to_status": requested_status,
                "user": principal.email,
            },
        )

        return TransitionResult(
            entity=updated,
            status_change=StatusChange(
                from_status=current,
                to_status=requested_status,
                changed_by=principal.email,
                changed_at=at,
                reason=reason,
            ),
        )

    def available_transitions(self, kind: str, entity_id, principal: Principal) -> AvailableTransitions:
        table = self.table(kind)
        entity = self.repository.load(kind, entity_id)
        guard = self.guard(kind)

        return AvailableTransitions(
            current_status=entity.status,
            allowed_transitions=table.ordered_targets(entity.status),
            available_transitions=guard.available_for(entity.status, principal.role),
        )

    # ------------------------------------------------------------------
    # Preconditions beyond the graph
    # ------------------------------------------------------------------

    @staticmethod
    def _check_not_compound(table: TransitionTable, current: str, requested: str) -> None:
        if requested in table.compound_states:
            raise InvalidStateError(
                f"{table.kind.capitalize()} can only reach {requested} through conversion",
                details={"currentStatus": current, "requestedStatus": requested},
            )

    @staticmethod
    def _check_required_fields(binding, entity, requested: str) -> None:
        missing = [
            attname.removesuffix("_id")
            for attname in binding.required_fields.get(requested, ())
            if getattr(entity, attname) in (None, "")
        ]
        if missing:
            raise ValidationError(
                f"{binding.label} needs {', '.join(missing)} before moving to {requested}",
                details={field: ["This field is required."] for field in missing},
            )
