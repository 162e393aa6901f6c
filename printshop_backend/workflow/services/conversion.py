# workflow/services/conversion.py

"""
BUDGET -> ORDER CONVERSION

An APPROVED budget becomes exactly one BUDGET_DERIVED order.

Both writes (create Order, swap Budget APPROVED -> CONVERTED) happen in one
transaction.atomic block. A lost swap or a uniqueness violation raises
ConflictError and rolls both back, so a budget is never CONVERTED without an
order and never left APPROVED with one.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from django.utils import timezone

from budgets.models import Budget
from orders.models import Order
from orders.services.order_number import generate_order_number
from permissions.roles import PRIVILEGED_ROLES, ordered_roles
from workflow.services import audit_trail
from workflow.services.exceptions import (
    InvalidStateError,
    PermissionError as WorkflowPermissionError,
)
from workflow.services.principal import Principal
from workflow.services.repository import DjangoWorkflowRepository, WorkflowRepository
from workflow.services.transition_table import KIND_BUDGET, KIND_ORDER

logger = logging.getLogger("workflow")


@dataclass(frozen=True)
class ConversionResult:
    budget: Budget
    order: Order


def order_fields_from_budget(budget: Budget) -> dict[str, Any]:
    """Content copied from a budget onto its derived order."""
    return {
        "client_id": budget.client_id,
        "center_id": budget.center_id,
        "title": budget.titulo,
        "tiragem": budget.tiragem,
        "formato": budget.formato,
        "num_paginas_total": budget.total_pgs,
        "num_paginas_coloridas": budget.pgs_colors,
        "valor_unitario": budget.preco_unitario,
        "valor_total": budget.preco_total,
        "prazo_entrega": budget.prazo_producao,
        "data_entrega": budget.data_entrega,
        "obs_producao": budget.observacoes,
    }


class ConversionWorkflow:
    def __init__(
        self,
        repository: Optional[WorkflowRepository] = None,
        clock: Callable[[], datetime] = timezone.now,
        number_generator: Callable[[datetime], str] = generate_order_number,
    ):
        self.repository = repository or DjangoWorkflowRepository()
        self.clock = clock
        self.number_generator = number_generator

    def convert(self, budget_id, principal: Principal) -> ConversionResult:
        budget = self.repository.load(KIND_BUDGET, budget_id)

        if budget.status != Budget.STATUS_APPROVED:
            raise InvalidStateError(
                f"Only APPROVED budgets can be converted (budget is {budget.status})",
                details={"currentStatus": budget.status, "requiredStatus": Budget.STATUS_APPROVED},
            )

        if principal.role not in PRIVILEGED_ROLES:
            raise WorkflowPermissionError(
                "Only moderators and admins can convert budgets",
                required_roles=ordered_roles(PRIVILEGED_ROLES),
                role=principal.role,
                target_status=Budget.STATUS_CONVERTED,
            )

        self._check_convertible(budget)

        at = self.clock()
        order_fields = order_fields_from_budget(budget)
        order_fields.update(
            {
                "budget_id": budget.pk,
                "order_type": Order.TYPE_BUDGET_DERIVED,
                "status": Order.STATUS_PENDING,
                "created_by_id": principal.id,
            }
        )

        entry = audit_trail.format_entry(
            Budget.STATUS_APPROVED,
            Budget.STATUS_CONVERTED,
            principal.email,
            None,
            at,
        )

        with self.repository.atomic():
            order_fields["numero_pedido"] = budget.numero_pedido or self.number_generator(at)
            order = self.repository.create(KIND_ORDER, order_fields)
            budget = self.repository.commit(
                KIND_BUDGET,
                budget.pk,
                {
                    "status": Budget.STATUS_CONVERTED,
                    "observacoes": audit_trail.append(budget.observacoes, entry),
                    "numero_pedido": order.numero_pedido,
                    "converted_at": at,
                },
                expected_prior_state=Budget.STATUS_APPROVED,
            )

        logger.info(
            "Budget converted to order",
            extra={
                "budget_id": budget.pk,
                "order_id": order.pk,
                "numero_pedido": order.numero_pedido,
                "user": principal.email,
            },
        )

        return ConversionResult(budget=budget, order=order)

    def _check_convertible(self, budget: Budget) -> None:
        if self.repository.exists(KIND_ORDER, budget_id=budget.pk):
            raise InvalidStateError(
                f"Budget {budget.pk} is already linked to an order",
                details={"budgetId": budget.pk},
            )

        for attr, label in (("client", "client"), ("center", "production center")):
            related = getattr(budget, attr)
            if related is None:
                raise InvalidStateError(
                    f"Budget {budget.pk} has no {label}",
                    details={"field": attr},
                )
            if not related.active:
                raise InvalidStateError(
                    f"The budget's {label} is inactive",
                    details={"field": attr, "id": related.pk},
                )
