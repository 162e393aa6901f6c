# budgets/models/__init__.py

from .budget import Budget

__all__ = ["Budget"]
