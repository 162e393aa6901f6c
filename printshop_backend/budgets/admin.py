# budgets/admin.py

from django.contrib import admin

from budgets.models import Budget


@admin.register(Budget)
class BudgetAdmin(admin.ModelAdmin):
    list_display = ("id", "titulo", "client", "status", "preco_total", "created_at")
    list_filter = ("status", "center")
    search_fields = ("titulo", "numero_pedido", "solicitante", "editorial")
    readonly_fields = (
        "status",
        "observacoes",
        "submitted_at",
        "approved_at",
        "rejected_at",
        "converted_at",
        "approved_by",
        "rejected_by",
        "created_by",
        "created_at",
        "updated_at",
    )
