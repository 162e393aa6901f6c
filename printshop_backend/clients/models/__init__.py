# clients/models/__init__.py

from .center import ProductionCenter
from .client import Client

__all__ = ["Client", "ProductionCenter"]
