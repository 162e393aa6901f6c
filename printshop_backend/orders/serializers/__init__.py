# orders/serializers/__init__.py

from .order import OrderBudgetSummarySerializer, OrderSerializer, OrderWriteSerializer

__all__ = ["OrderBudgetSummarySerializer", "OrderSerializer", "OrderWriteSerializer"]
