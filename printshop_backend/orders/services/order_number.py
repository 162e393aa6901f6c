# orders/services/order_number.py

"""
Order number generation.

Format: <PREFIX>-<NNNN>/<YYYYMM>, e.g. ORD-0007/202510.
The sequence restarts every month. Two concurrent creators may compute the
same number; Order.numero_pedido is unique, so the loser fails with a
ConflictError instead of writing a duplicate.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone

from orders.models import Order


def _prefix() -> str:
    return getattr(settings, "ORDER_NUMBER_PREFIX", "ORD") or "ORD"


def generate_order_number(at: Optional[datetime] = None) -> str:
    at = timezone.localtime(at or timezone.now())
    prefix = _prefix()
    period = at.strftime("%Y%m")

    pattern = re.compile(rf"^{re.escape(prefix)}-(\d+)/{period}$")
    existing = Order.objects.filter(
        numero_pedido__startswith=f"{prefix}-",
        numero_pedido__endswith=f"/{period}",
    ).values_list("numero_pedido", flat=True)

    highest = 0
    for numero in existing:
        match = pattern.match(numero)
        if match:
            highest = max(highest, int(match.group(1)))

    return f"{prefix}-{highest + 1:04d}/{period}"
