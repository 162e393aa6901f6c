from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("clients", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Budget",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("DRAFT", "Draft"),
                            ("SUBMITTED", "Submitted"),
                            ("APPROVED", "Approved"),
                            ("REJECTED", "Rejected"),
                            ("CONVERTED", "Converted"),
                            ("CANCELLED", "Cancelled"),
                        ],
                        db_index=True,
                        default="DRAFT",
                        max_length=20,
                    ),
                ),
                ("numero_pedido", models.CharField(blank=True, default="", max_length=32)),
                ("titulo", models.CharField(max_length=255)),
                ("tiragem", models.PositiveIntegerField(help_text="Print run (copies)")),
                ("formato", models.CharField(max_length=64)),
                ("total_pgs", models.PositiveIntegerField(default=0)),
                ("pgs_colors", models.PositiveIntegerField(default=0)),
                ("preco_unitario", models.DecimalField(decimal_places=4, max_digits=12)),
                ("preco_total", models.DecimalField(decimal_places=2, max_digits=14)),
                ("prazo_producao", models.CharField(blank=True, default="", max_length=100)),
                ("data_entrega", models.DateField(blank=True, null=True)),
                ("solicitante", models.CharField(blank=True, default="", max_length=255)),
                ("editorial", models.CharField(blank=True, default="", max_length=255)),
                ("tipo_produto", models.CharField(blank=True, default="", max_length=100)),
                ("papel_miolo", models.CharField(blank=True, default="", max_length=100)),
                ("papel_capa", models.CharField(blank=True, default="", max_length=100)),
                ("acabamento", models.CharField(blank=True, default="", max_length=100)),
                ("pagamento", models.CharField(blank=True, default="", max_length=100)),
                ("frete", models.CharField(blank=True, default="", max_length=100)),
                ("observacoes", models.TextField(blank=True, default="")),
                ("submitted_at", models.DateTimeField(blank=True, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("rejected_at", models.DateTimeField(blank=True, null=True)),
                ("converted_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="budgets",
                        to="clients.client",
                    ),
                ),
                (
                    "center",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="budgets",
                        to="clients.productioncenter",
                    ),
                ),
                (
                    "approved_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="budgets_approved",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "rejected_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="budgets_rejected",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "created_by",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="budgets_created",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["status", "created_at"], name="budget_status_created_idx")],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("pgs_colors__lte", models.F("total_pgs"))),
                        name="budget_colored_pages_within_total",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("preco_unitario__gte", Decimal("0"))),
                        name="budget_unit_price_nonnegative",
                    ),
                ],
            },
        ),
    ]
