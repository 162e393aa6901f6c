# budgets/serializers/__init__.py

from .budget import BudgetSerializer, BudgetWriteSerializer

__all__ = ["BudgetSerializer", "BudgetWriteSerializer"]
