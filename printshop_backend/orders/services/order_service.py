# orders/services/order_service.py

"""
ORDER SERVICE

- create_direct_order: orders that skip the budget flow (DIRECT_ORDER / RUSH_ORDER)
- update_order:        generic content edits, never touching orderType,
                       budgetId or status
- delete_order:        admin removal of orders that have no source budget

BUDGET_DERIVED orders are created only by workflow.services.conversion.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from django.utils import timezone

from orders.models import Order
from orders.serializers import OrderWriteSerializer
from orders.services.order_number import generate_order_number
from permissions.roles import (
    PRIVILEGED_ROLES,
    ROLE_ADMIN,
    ROLE_MODERATOR,
    has_at_least_role,
    ordered_roles,
)
from workflow.services import audit_trail
from workflow.services.exceptions import (
    ImmutableFieldError,
    InvalidStateError,
    PermissionError as WorkflowPermissionError,
    ValidationError,
)
from workflow.services.payloads import require_object
from workflow.services.principal import Principal
from workflow.services.repository import DjangoWorkflowRepository
from workflow.services.transition_table import KIND_ORDER

logger = logging.getLogger(__name__)

DIRECT_ORDER_TYPES = frozenset({Order.TYPE_DIRECT_ORDER, Order.TYPE_RUSH_ORDER})


def _require_privileged(principal: Principal, action: str) -> None:
    if not has_at_least_role(principal.role, ROLE_MODERATOR):
        raise WorkflowPermissionError(
            f"Only moderators and admins can {action}",
            required_roles=ordered_roles(PRIVILEGED_ROLES),
            role=principal.role,
        )


def _require_active_references(client, center) -> None:
    errors = {}
    if client is not None and not client.active:
        errors["clientId"] = ["Client is inactive."]
    if center is not None and not center.active:
        errors["centerId"] = ["Production center is inactive."]
    if errors:
        raise ValidationError("Inactive client or production center", details=errors)


# ============================================================
# DIRECT CREATION
# ============================================================


def create_direct_order(payload: Mapping[str, Any], principal: Principal) -> Order:
    _require_privileged(principal, "create orders directly")
    payload = require_object(payload)

    if payload.get("budgetId") is not None:
        raise ValidationError(
            "Direct orders cannot reference a budget; convert the budget instead",
            details={"budgetId": ["Not allowed for direct orders."]},
        )

    order_type = payload.get("orderType") or Order.TYPE_DIRECT_ORDER
    if order_type not in DIRECT_ORDER_TYPES:
        raise ValidationError(
            f"orderType {order_type} cannot be created directly",
            details={"orderType": [f"Must be one of: {', '.join(sorted(DIRECT_ORDER_TYPES))}."]},
        )

    serializer = OrderWriteSerializer(data=payload)
    if not serializer.is_valid():
        raise ValidationError.from_serializer(serializer)

    data = dict(serializer.validated_data)
    _require_active_references(data["client"], data["center"])

    repository = DjangoWorkflowRepository()
    with repository.atomic():
        if not data.get("numero_pedido"):
            data["numero_pedido"] = generate_order_number(timezone.now())

        order = repository.create(
            KIND_ORDER,
            {
                **data,
                "order_type": order_type,
                "status": Order.STATUS_PENDING,
                "budget": None,
                "created_by_id": principal.id,
            },
        )

    logger.info(
        "Direct order created",
        extra={
            "order_id": order.pk,
            "numero_pedido": order.numero_pedido,
            "order_type": order.order_type,
            "user": principal.email,
        },
    )
    return order


# ============================================================
# GENERIC UPDATE
# ============================================================


def _check_immutable(order: Order, payload: Mapping[str, Any]) -> None:
    protected = (
        ("budgetId", order.budget_id),
        ("orderType", order.order_type),
        ("status", order.status),
    )
    for wire_name, current in protected:
        if wire_name in payload and payload[wire_name] != current:
            message = None
            if wire_name == "status":
                message = "Order status changes must go through the status endpoint"
            raise ImmutableFieldError(wire_name, current, payload[wire_name], message=message)


def update_order(order_id, payload: Mapping[str, Any], principal: Principal) -> Order:
    _require_privileged(principal, "edit orders")
    payload = require_object(payload)

    repository = DjangoWorkflowRepository()
    order = repository.load(KIND_ORDER, order_id)

    _check_immutable(order, payload)

    content = {
        key: value
        for key, value in payload.items()
        if key not in ("budgetId", "orderType", "status")
    }
    serializer = OrderWriteSerializer(order, data=content, partial=True)
    if not serializer.is_valid():
        raise ValidationError.from_serializer(serializer)

    changes = dict(serializer.validated_data)
    _require_active_references(changes.get("client"), changes.get("center"))

    if changes.get("numero_pedido") == "":
        changes.pop("numero_pedido")

    entry = audit_trail.format_update_entry("Order", principal.email, timezone.now())
    changes["obs_producao"] = audit_trail.append(order.obs_producao, entry)

    order = repository.commit(
        KIND_ORDER,
        order.pk,
        changes,
        expected_prior_state=order.status,
    )

    logger.info(
        "Order updated",
        extra={"order_id": order.pk, "user": principal.email},
    )
    return order


# ============================================================
# DELETE
# ============================================================


def delete_order(order_id, principal: Principal) -> None:
    if not has_at_least_role(principal.role, ROLE_ADMIN):
        raise WorkflowPermissionError(
            "Only admins can delete orders",
            required_roles=[ROLE_ADMIN],
            role=principal.role,
        )

    repository = DjangoWorkflowRepository()
    order = repository.load(KIND_ORDER, order_id)

    if order.order_type == Order.TYPE_BUDGET_DERIVED:
        raise InvalidStateError(
            "Orders converted from a budget cannot be deleted",
            details={"orderType": order.order_type, "budgetId": order.budget_id},
        )

    order.delete()

    logger.info(
        "Order deleted",
        extra={"order_id": order_id, "user": principal.email},
    )
