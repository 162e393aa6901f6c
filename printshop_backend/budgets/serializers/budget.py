# budgets/serializers/budget.py

from decimal import Decimal

from rest_framework import serializers

from budgets.models import Budget
from budgets.models.budget import TOTAL_TOLERANCE, expected_total
from clients.models import Client, ProductionCenter
from clients.serializers import ClientSerializer, ProductionCenterSerializer

PRICING_FIELDS = frozenset({"tiragem", "preco_unitario", "preco_total"})


class BudgetSerializer(serializers.ModelSerializer):
    """
    CANONICAL BUDGET SERIALIZER (read-only)

    NOTE:
    - client/center are embedded in full; the sanitizer trims them per role
    - orderId is the id of the order this budget was converted into
    """

    client = ClientSerializer(read_only=True)
    center = ProductionCenterSerializer(read_only=True)
    orderId = serializers.SerializerMethodField()

    class Meta:
        model = Budget
        fields = [
            "id",
            "status",
            "numero_pedido",
            "titulo",
            "tiragem",
            "formato",
            "total_pgs",
            "pgs_colors",
            "preco_unitario",
            "preco_total",
            "prazo_producao",
            "data_entrega",
            "solicitante",
            "editorial",
            "tipo_produto",
            "papel_miolo",
            "papel_capa",
            "acabamento",
            "pagamento",
            "frete",
            "observacoes",
            "client",
            "center",
            "orderId",
            "submitted_at",
            "approved_at",
            "rejected_at",
            "converted_at",
            "approved_by",
            "rejected_by",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_orderId(self, obj):
        order = getattr(obj, "order", None)
        return order.pk if order is not None else None


class BudgetWriteSerializer(serializers.Serializer):
    """
    Input for create / generic update.

    preco_total is optional: when omitted it is computed from
    tiragem x preco_unitario; when supplied it must match within 0.01.
    """

    clientId = serializers.PrimaryKeyRelatedField(
        source="client",
        queryset=Client.objects.all(),
        required=False,
        allow_null=True,
    )
    centerId = serializers.PrimaryKeyRelatedField(
        source="center",
        queryset=ProductionCenter.objects.all(),
        required=False,
        allow_null=True,
    )

    numero_pedido = serializers.CharField(max_length=32, required=False, allow_blank=True)
    titulo = serializers.CharField(max_length=255)
    tiragem = serializers.IntegerField(min_value=1)
    formato = serializers.CharField(max_length=64)
    total_pgs = serializers.IntegerField(min_value=0, required=False)
    pgs_colors = serializers.IntegerField(min_value=0, required=False)

    preco_unitario = serializers.DecimalField(
        max_digits=12, decimal_places=4, min_value=Decimal("0")
    )
    preco_total = serializers.DecimalField(
        max_digits=14, decimal_places=2, min_value=Decimal("0"), required=False
    )

    prazo_producao = serializers.CharField(max_length=100, required=False, allow_blank=True)
    data_entrega = serializers.DateField(required=False, allow_null=True)

    solicitante = serializers.CharField(max_length=255, required=False, allow_blank=True)
    editorial = serializers.CharField(max_length=255, required=False, allow_blank=True)
    tipo_produto = serializers.CharField(max_length=100, required=False, allow_blank=True)
    papel_miolo = serializers.CharField(max_length=100, required=False, allow_blank=True)
    papel_capa = serializers.CharField(max_length=100, required=False, allow_blank=True)
    acabamento = serializers.CharField(max_length=100, required=False, allow_blank=True)
    pagamento = serializers.CharField(max_length=100, required=False, allow_blank=True)
    frete = serializers.CharField(max_length=100, required=False, allow_blank=True)

    observacoes = serializers.CharField(required=False, allow_blank=True)

    def _current(self, attrs, name, default=None):
        if name in attrs:
            return attrs[name]
        if self.instance is not None:
            return getattr(self.instance, name)
        return default

    def validate(self, attrs):
        total_pgs = self._current(attrs, "total_pgs", 0)
        pgs_colors = self._current(attrs, "pgs_colors", 0)
        if pgs_colors > total_pgs:
            raise serializers.ValidationError(
                {"pgs_colors": "pgs_colors cannot exceed total_pgs"}
            )

        # a partial edit that leaves pricing alone keeps the stored total
        if self.instance is not None and not PRICING_FIELDS.intersection(attrs):
            return attrs

        tiragem = self._current(attrs, "tiragem")
        preco_unitario = self._current(attrs, "preco_unitario")
        expected = expected_total(tiragem, preco_unitario)

        supplied = attrs.get("preco_total")
        if supplied is not None and abs(supplied - expected) > TOTAL_TOLERANCE:
            raise serializers.ValidationError(
                {"preco_total": f"preco_total must equal tiragem x preco_unitario ({expected})"}
            )

        attrs["preco_total"] = supplied if supplied is not None else expected
        return attrs
