# workflow/services/transition_table.py

"""
WORKFLOW TRANSITION TABLES

Defines the ONLY allowed status transitions for Budget and Order, and the
roles allowed to move an entity INTO each state.

DESIGN PRINCIPLES:
- No database writes
- No side effects
- Immutable values, injected into the guard and the engine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from budgets.models import Budget
from orders.models import Order
from permissions.roles import ALL_ROLES, PRIVILEGED_ROLES
from workflow.services.exceptions import ValidationError

KIND_BUDGET = "budget"
KIND_ORDER = "order"


@dataclass(frozen=True)
class TransitionTable:
    """
    Directed graph of states plus the per-target-state role allow-list.

    `states` keeps declaration order; every list this table hands out
    (allowed targets, available targets) follows it so responses are stable.

    `compound_states` are targets the graph allows but that only a compound
    operation (budget conversion) may write.
    """

    kind: str
    states: tuple[str, ...]
    allowed_transitions: Mapping[str, frozenset[str]]
    required_roles: Mapping[str, frozenset[str]]
    compound_states: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def build(
        cls,
        *,
        kind: str,
        states: Iterable[str],
        allowed: Mapping[str, Iterable[str]],
        roles: Mapping[str, Iterable[str]],
        compound_states: Iterable[str] = (),
    ) -> "TransitionTable":
        states = tuple(states)
        known = set(states)

        for source, targets in allowed.items():
            unknown = ({source} | set(targets)) - known
            if unknown:
                raise ValueError(f"{kind} table references unknown states: {sorted(unknown)}")

        missing_roles = known - set(roles)
        if missing_roles:
            raise ValueError(f"{kind} table has no required roles for: {sorted(missing_roles)}")

        return cls(
            kind=kind,
            states=states,
            allowed_transitions=MappingProxyType(
                {state: frozenset(allowed.get(state, ())) for state in states}
            ),
            required_roles=MappingProxyType(
                {state: frozenset(roles[state]) for state in states}
            ),
            compound_states=frozenset(compound_states),
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def normalize(self, status) -> str:
        """Return `status` if it is a state of this table, else ValidationError."""
        if not isinstance(status, str) or status not in self.allowed_transitions:
            raise ValidationError(
                f"Unknown {self.kind} status: {status!r}",
                details={"status": status, "validStatuses": list(self.states)},
            )
        return status

    def allowed_from(self, status: str) -> frozenset[str]:
        return self.allowed_transitions.get(status, frozenset())

    def roles_for(self, status: str) -> frozenset[str]:
        return self.required_roles.get(status, frozenset())

    def ordered_targets(self, status: str) -> list[str]:
        allowed = self.allowed_from(status)
        return [state for state in self.states if state in allowed]

    def is_terminal(self, status: str) -> bool:
        return not self.allowed_from(status)


# ============================================================
# DEFAULT TABLES
# ============================================================

BUDGET_TRANSITIONS = TransitionTable.build(
    kind=KIND_BUDGET,
    states=[
        Budget.STATUS_DRAFT,
        Budget.STATUS_SUBMITTED,
        Budget.STATUS_APPROVED,
        Budget.STATUS_REJECTED,
        Budget.STATUS_CONVERTED,
        Budget.STATUS_CANCELLED,
    ],
    allowed={
        Budget.STATUS_DRAFT: {Budget.STATUS_SUBMITTED},
        Budget.STATUS_SUBMITTED: {Budget.STATUS_APPROVED, Budget.STATUS_REJECTED},
        Budget.STATUS_APPROVED: {Budget.STATUS_CONVERTED},
        Budget.STATUS_REJECTED: {Budget.STATUS_SUBMITTED},
        # CANCELLED has no inbound edge; kept for stored rows
    },
    roles={
        Budget.STATUS_DRAFT: PRIVILEGED_ROLES,
        Budget.STATUS_SUBMITTED: PRIVILEGED_ROLES,
        Budget.STATUS_APPROVED: PRIVILEGED_ROLES,
        Budget.STATUS_REJECTED: PRIVILEGED_ROLES,
        Budget.STATUS_CONVERTED: PRIVILEGED_ROLES,
        Budget.STATUS_CANCELLED: PRIVILEGED_ROLES,
    },
    compound_states={Budget.STATUS_CONVERTED},
)

ORDER_TRANSITIONS = TransitionTable.build(
    kind=KIND_ORDER,
    states=[
        Order.STATUS_PENDING,
        Order.STATUS_IN_PRODUCTION,
        Order.STATUS_COMPLETED,
        Order.STATUS_DELIVERED,
        Order.STATUS_ON_HOLD,
        Order.STATUS_CANCELLED,
    ],
    allowed={
        Order.STATUS_PENDING: {
            Order.STATUS_IN_PRODUCTION,
            Order.STATUS_ON_HOLD,
            Order.STATUS_CANCELLED,
        },
        Order.STATUS_IN_PRODUCTION: {
            Order.STATUS_COMPLETED,
            Order.STATUS_ON_HOLD,
            Order.STATUS_CANCELLED,
        },
        Order.STATUS_ON_HOLD: {
            Order.STATUS_PENDING,
            Order.STATUS_IN_PRODUCTION,
            Order.STATUS_CANCELLED,
        },
        Order.STATUS_COMPLETED: {
            Order.STATUS_DELIVERED,
            Order.STATUS_CANCELLED,
        },
    },
    roles={
        Order.STATUS_PENDING: ALL_ROLES,
        Order.STATUS_ON_HOLD: ALL_ROLES,
        Order.STATUS_IN_PRODUCTION: PRIVILEGED_ROLES,
        Order.STATUS_COMPLETED: PRIVILEGED_ROLES,
        Order.STATUS_DELIVERED: PRIVILEGED_ROLES,
        Order.STATUS_CANCELLED: PRIVILEGED_ROLES,
    },
)

DEFAULT_TABLES = MappingProxyType(
    {
        KIND_BUDGET: BUDGET_TRANSITIONS,
        KIND_ORDER: ORDER_TRANSITIONS,
    }
)
