# orders/models/order.py

from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from budgets.models import Budget
from clients.models import Client, ProductionCenter
from workflow.services.exceptions import ImmutableFieldError

User = settings.AUTH_USER_MODEL


class Order(models.Model):
    """
    A committed production job.

    GUARANTEES:
    - order_type and budget never change after creation
    - budget is set iff order_type == BUDGET_DERIVED
    - status only moves through the workflow engine
    - obs_producao is the append-only audit log
    """

    STATUS_PENDING = "PENDING"
    STATUS_IN_PRODUCTION = "IN_PRODUCTION"
    STATUS_COMPLETED = "COMPLETED"
    STATUS_DELIVERED = "DELIVERED"
    STATUS_ON_HOLD = "ON_HOLD"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_IN_PRODUCTION, "In production"),
        (STATUS_COMPLETED, "Completed"),
        (STATUS_DELIVERED, "Delivered"),
        (STATUS_ON_HOLD, "On hold"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    TYPE_BUDGET_DERIVED = "BUDGET_DERIVED"
    TYPE_DIRECT_ORDER = "DIRECT_ORDER"
    TYPE_RUSH_ORDER = "RUSH_ORDER"

    TYPE_CHOICES = [
        (TYPE_BUDGET_DERIVED, "Budget derived"),
        (TYPE_DIRECT_ORDER, "Direct order"),
        (TYPE_RUSH_ORDER, "Rush order"),
    ]

    # field name -> wire name used in ImmutableFieldError
    IMMUTABLE_FIELDS = {
        "order_type": "orderType",
        "budget_id": "budgetId",
    }

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_PENDING,
        db_index=True,
    )
    order_type = models.CharField(
        max_length=20,
        choices=TYPE_CHOICES,
        default=TYPE_DIRECT_ORDER,
        db_index=True,
    )

    budget = models.OneToOneField(
        Budget,
        on_delete=models.PROTECT,
        related_name="order",
        null=True,
        blank=True,
    )

    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        related_name="orders",
    )
    center = models.ForeignKey(
        ProductionCenter,
        on_delete=models.PROTECT,
        related_name="orders",
    )

    numero_pedido = models.CharField(max_length=32, unique=True)
    title = models.CharField(max_length=255)
    tiragem = models.PositiveIntegerField()
    formato = models.CharField(max_length=64)
    num_paginas_total = models.PositiveIntegerField(default=0)
    num_paginas_coloridas = models.PositiveIntegerField(default=0)

    valor_unitario = models.DecimalField(max_digits=12, decimal_places=4)
    valor_total = models.DecimalField(max_digits=14, decimal_places=2)

    prazo_entrega = models.CharField(max_length=100, blank=True, default="")
    data_entrega = models.DateField(null=True, blank=True)

    obs = models.TextField(blank=True, default="")
    obs_producao = models.TextField(blank=True, default="")

    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="order_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(order_type="BUDGET_DERIVED", budget__isnull=False)
                    | (~models.Q(order_type="BUDGET_DERIVED") & models.Q(budget__isnull=True))
                ),
                name="order_budget_iff_budget_derived",
            ),
            models.CheckConstraint(
                condition=models.Q(num_paginas_coloridas__lte=models.F("num_paginas_total")),
                name="order_colored_pages_within_total",
            ),
            models.CheckConstraint(
                condition=models.Q(valor_unitario__gte=Decimal("0")),
                name="order_unit_price_nonnegative",
            ),
        ]

    def clean(self):
        errors = {}

        derived = self.order_type == self.TYPE_BUDGET_DERIVED
        if derived and self.budget_id is None:
            errors["budget"] = "BUDGET_DERIVED orders must reference a budget"
        if not derived and self.budget_id is not None:
            errors["budget"] = "Only BUDGET_DERIVED orders may reference a budget"

        if self.num_paginas_coloridas is not None and self.num_paginas_total is not None:
            if self.num_paginas_coloridas > self.num_paginas_total:
                errors["num_paginas_coloridas"] = (
                    "num_paginas_coloridas cannot exceed num_paginas_total"
                )

        if errors:
            raise ValidationError(errors)

    def _validate_immutable(self):
        previous = (
            Order.objects.filter(pk=self.pk)
            .values("status", "order_type", "budget_id")
            .first()
        )
        if previous is None:
            return

        for field, wire_name in self.IMMUTABLE_FIELDS.items():
            if previous[field] != getattr(self, field):
                raise ImmutableFieldError(wire_name, previous[field], getattr(self, field))

        if previous["status"] != self.status:
            raise ImmutableFieldError(
                "status",
                previous["status"],
                self.status,
                message="Order status changes must go through the workflow engine",
            )

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            self._validate_immutable()

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"Order {self.numero_pedido} | {self.title} ({self.status})"
