from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("budgets", "0001_initial"),
        ("clients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("IN_PRODUCTION", "In production"),
                            ("COMPLETED", "Completed"),
                            ("DELIVERED", "Delivered"),
                            ("ON_HOLD", "On hold"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        db_index=True,
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "order_type",
                    models.CharField(
                        choices=[
                            ("BUDGET_DERIVED", "Budget derived"),
                            ("DIRECT_ORDER", "Direct order"),
                            ("RUSH_ORDER", "Rush order"),
                        ],
                        db_index=True,
                        default="DIRECT_ORDER",
                        max_length=20,
                    ),
                ),
                ("numero_pedido", models.CharField(max_length=32, unique=True)),
                ("title", models.CharField(max_length=255)),
                ("tiragem", models.PositiveIntegerField()),
                ("formato", models.CharField(max_length=64)),
                ("num_paginas_total", models.PositiveIntegerField(default=0)),
                ("num_paginas_coloridas", models.PositiveIntegerField(default=0)),
                ("valor_unitario", models.DecimalField(decimal_places=4, max_digits=12)),
                ("valor_total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("prazo_entrega", models.CharField(blank=True, default="", max_length=100)),
                ("data_entrega", models.DateField(blank=True, null=True)),
                ("obs", models.TextField(blank=True, default="")),
                ("obs_producao", models.TextField(blank=True, default="")),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "budget",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="order",
                        to="budgets.budget",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="clients.client",
                    ),
                ),
                (
                    "center",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="orders",
                        to="clients.productioncenter",
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="orders_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "created_at"], name="order_status_created_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(
                            models.Q(("budget__isnull", False), ("order_type", "BUDGET_DERIVED")),
                            models.Q(models.Q(("order_type", "BUDGET_DERIVED"), _negated=True), ("budget__isnull", True)),
                            _connector="OR",
                        ),
                        name="order_budget_iff_budget_derived",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("num_paginas_coloridas__lte", models.F("num_paginas_total"))),
                        name="order_colored_pages_within_total",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("valor_unitario__gte", Decimal("0"))),
                        name="order_unit_price_nonnegative",
                    ),
                ],
            },
        ),
    ]
