# orders/serializers/order.py

from decimal import Decimal

from rest_framework import serializers

from budgets.models import Budget
from budgets.models.budget import TOTAL_TOLERANCE, expected_total
from clients.models import Client, ProductionCenter
from clients.serializers import ClientSerializer, ProductionCenterSerializer
from orders.models import Order

PRICING_FIELDS = frozenset({"tiragem", "valor_unitario", "valor_total"})


class OrderBudgetSummarySerializer(serializers.ModelSerializer):
    """
    Source budget embedded in a BUDGET_DERIVED order.
    Carries money keys, so USER payloads lose them in the sanitizer.
    """

    class Meta:
        model = Budget
        fields = [
            "id",
            "status",
            "numero_pedido",
            "titulo",
            "preco_unitario",
            "preco_total",
            "approved_at",
            "converted_at",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """
    CANONICAL ORDER SERIALIZER (read-only)

    Wire names follow the camelCase order contract
    (orderType, budgetId, valorUnitario, ...).
    """

    orderType = serializers.CharField(source="order_type", read_only=True)
    budgetId = serializers.IntegerField(source="budget_id", read_only=True, allow_null=True)
    clientId = serializers.IntegerField(source="client_id", read_only=True)
    centerId = serializers.IntegerField(source="center_id", read_only=True)
    numPaginasTotal = serializers.IntegerField(source="num_paginas_total", read_only=True)
    numPaginasColoridas = serializers.IntegerField(source="num_paginas_coloridas", read_only=True)
    valorUnitario = serializers.DecimalField(
        source="valor_unitario", max_digits=12, decimal_places=4, read_only=True
    )
    valorTotal = serializers.DecimalField(
        source="valor_total", max_digits=14, decimal_places=2, read_only=True
    )
    prazoEntrega = serializers.CharField(source="prazo_entrega", read_only=True)

    client = ClientSerializer(read_only=True)
    center = ProductionCenterSerializer(read_only=True)
    budget = OrderBudgetSummarySerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "orderType",
            "budgetId",
            "numero_pedido",
            "title",
            "tiragem",
            "formato",
            "numPaginasTotal",
            "numPaginasColoridas",
            "valorUnitario",
            "valorTotal",
            "prazoEntrega",
            "data_entrega",
            "obs",
            "obs_producao",
            "clientId",
            "centerId",
            "client",
            "center",
            "budget",
            "created_by",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderWriteSerializer(serializers.Serializer):
    """
    Input for direct creation / generic update (content fields only).

    orderType, budgetId and status are checked by the order service before
    this serializer runs; they are not content.
    """

    clientId = serializers.PrimaryKeyRelatedField(
        source="client", queryset=Client.objects.all()
    )
    centerId = serializers.PrimaryKeyRelatedField(
        source="center", queryset=ProductionCenter.objects.all()
    )

    numero_pedido = serializers.CharField(max_length=32, required=False, allow_blank=True)
    title = serializers.CharField(max_length=255)
    tiragem = serializers.IntegerField(min_value=1)
    formato = serializers.CharField(max_length=64)
    numPaginasTotal = serializers.IntegerField(
        source="num_paginas_total", min_value=0, required=False
    )
    numPaginasColoridas = serializers.IntegerField(
        source="num_paginas_coloridas", min_value=0, required=False
    )

    valorUnitario = serializers.DecimalField(
        source="valor_unitario", max_digits=12, decimal_places=4, min_value=Decimal("0")
    )
    valorTotal = serializers.DecimalField(
        source="valor_total",
        max_digits=14,
        decimal_places=2,
        min_value=Decimal("0"),
        required=False,
    )

    prazoEntrega = serializers.CharField(
        source="prazo_entrega", max_length=100, required=False, allow_blank=True
    )
    data_entrega = serializers.DateField(required=False, allow_null=True)
    obs = serializers.CharField(required=False, allow_blank=True)

    def _current(self, attrs, name, default=None):
        if name in attrs:
            return attrs[name]
        if self.instance is not None:
            return getattr(self.instance, name)
        return default

    def validate(self, attrs):
        total = self._current(attrs, "num_paginas_total", 0)
        colored = self._current(attrs, "num_paginas_coloridas", 0)
        if colored > total:
            raise serializers.ValidationError(
                {"numPaginasColoridas": "numPaginasColoridas cannot exceed numPaginasTotal"}
            )

        # a partial edit that leaves pricing alone keeps the stored total
        if self.instance is not None and not PRICING_FIELDS.intersection(attrs):
            return attrs

        expected = expected_total(
            self._current(attrs, "tiragem"),
            self._current(attrs, "valor_unitario"),
        )
        supplied = attrs.get("valor_total")
        if supplied is not None and abs(supplied - expected) > TOTAL_TOLERANCE:
            raise serializers.ValidationError(
                {"valorTotal": f"valorTotal must equal tiragem x valorUnitario ({expected})"}
            )

        attrs["valor_total"] = supplied if supplied is not None else expected
        return attrs
