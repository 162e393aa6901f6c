# budgets/models/budget.py

from decimal import ROUND_HALF_UP, Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models

from clients.models import Client, ProductionCenter
from workflow.services.exceptions import ImmutableFieldError

User = settings.AUTH_USER_MODEL

TWOPLACES = Decimal("0.01")
TOTAL_TOLERANCE = Decimal("0.01")


def expected_total(tiragem, preco_unitario) -> Decimal:
    """preco_total implied by print run x unit price, rounded to cents."""
    return (Decimal(int(tiragem or 0)) * Decimal(str(preco_unitario or "0"))).quantize(
        TWOPLACES, rounding=ROUND_HALF_UP
    )


class Budget(models.Model):
    """
    A quoted, not-yet-committed print job.

    GUARANTEES:
    - status only moves through the workflow engine (queryset CAS updates);
      save() on an existing row refuses a status change
    - preco_total == tiragem * preco_unitario (within 0.01)
    - pgs_colors <= total_pgs
    - observacoes is the append-only audit log

    The Order a budget was converted into is reachable as `budget.order`
    (reverse side of Order.budget).
    """

    STATUS_DRAFT = "DRAFT"
    STATUS_SUBMITTED = "SUBMITTED"
    STATUS_APPROVED = "APPROVED"
    STATUS_REJECTED = "REJECTED"
    STATUS_CONVERTED = "CONVERTED"
    STATUS_CANCELLED = "CANCELLED"

    STATUS_CHOICES = [
        (STATUS_DRAFT, "Draft"),
        (STATUS_SUBMITTED, "Submitted"),
        (STATUS_APPROVED, "Approved"),
        (STATUS_REJECTED, "Rejected"),
        (STATUS_CONVERTED, "Converted"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    # Content fields may only be edited in these states.
    EDITABLE_STATUSES = frozenset({STATUS_DRAFT, STATUS_REJECTED})

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_DRAFT,
        db_index=True,
    )

    client = models.ForeignKey(
        Client,
        on_delete=models.PROTECT,
        related_name="budgets",
        null=True,
        blank=True,
    )
    center = models.ForeignKey(
        ProductionCenter,
        on_delete=models.PROTECT,
        related_name="budgets",
        null=True,
        blank=True,
    )

    numero_pedido = models.CharField(max_length=32, blank=True, default="")
    titulo = models.CharField(max_length=255)
    tiragem = models.PositiveIntegerField(help_text="Print run (copies)")
    formato = models.CharField(max_length=64)
    total_pgs = models.PositiveIntegerField(default=0)
    pgs_colors = models.PositiveIntegerField(default=0)

    preco_unitario = models.DecimalField(max_digits=12, decimal_places=4)
    preco_total = models.DecimalField(max_digits=14, decimal_places=2)

    prazo_producao = models.CharField(max_length=100, blank=True, default="")
    data_entrega = models.DateField(null=True, blank=True)

    solicitante = models.CharField(max_length=255, blank=True, default="")
    editorial = models.CharField(max_length=255, blank=True, default="")
    tipo_produto = models.CharField(max_length=100, blank=True, default="")
    papel_miolo = models.CharField(max_length=100, blank=True, default="")
    papel_capa = models.CharField(max_length=100, blank=True, default="")
    acabamento = models.CharField(max_length=100, blank=True, default="")
    pagamento = models.CharField(max_length=100, blank=True, default="")
    frete = models.CharField(max_length=100, blank=True, default="")

    observacoes = models.TextField(blank=True, default="")

    # Workflow stamps (written together with status)
    submitted_at = models.DateTimeField(null=True, blank=True)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)
    converted_at = models.DateTimeField(null=True, blank=True)

    approved_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="budgets_approved",
    )
    rejected_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="budgets_rejected",
    )
    created_by = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="budgets_created",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status", "created_at"], name="budget_status_created_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(pgs_colors__lte=models.F("total_pgs")),
                name="budget_colored_pages_within_total",
            ),
            models.CheckConstraint(
                condition=models.Q(preco_unitario__gte=Decimal("0")),
                name="budget_unit_price_nonnegative",
            ),
        ]

    @property
    def is_editable(self) -> bool:
        return self.status in self.EDITABLE_STATUSES

    def clean(self):
        errors = {}

        if self.pgs_colors is not None and self.total_pgs is not None:
            if self.pgs_colors > self.total_pgs:
                errors["pgs_colors"] = "pgs_colors cannot exceed total_pgs"

        if self.tiragem is not None and self.preco_unitario is not None and self.preco_total is not None:
            expected = expected_total(self.tiragem, self.preco_unitario)
            if abs(Decimal(str(self.preco_total)) - expected) > TOTAL_TOLERANCE:
                errors["preco_total"] = (
                    f"preco_total must equal tiragem x preco_unitario ({expected})"
                )

        if errors:
            raise ValidationError(errors)

    def save(self, *args, **kwargs):
        if self.pk and not self._state.adding:
            previous_status = (
                Budget.objects.filter(pk=self.pk).values_list("status", flat=True).first()
            )
            if previous_status is not None and previous_status != self.status:
                raise ImmutableFieldError(
                    "status",
                    previous_status,
                    self.status,
                    message="Budget status changes must go through the workflow engine",
                )

        self.full_clean()
        return super().save(*args, **kwargs)

    def __str__(self):
        return f"Budget #{self.pk} | {self.titulo} ({self.status})"
