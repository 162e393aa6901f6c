# workflow/apps.py

"""
WORKFLOW APP CONFIG

Budget/Order lifecycle engine:
- transition tables + guard
- audit trail appender
- transactional budget -> order conversion
- role-based response sanitizer

The app owns no models; it operates on budgets.Budget and orders.Order
through workflow.services.repository.
"""

from django.apps import AppConfig


class WorkflowConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "workflow"
    verbose_name = "Budget & Order Workflow"
