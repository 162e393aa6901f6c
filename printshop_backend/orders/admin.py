# orders/admin.py

from django.contrib import admin

from orders.models import Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("numero_pedido", "title", "client", "order_type", "status", "created_at")
    list_filter = ("status", "order_type", "center")
    search_fields = ("numero_pedido", "title")

    def get_readonly_fields(self, request, obj=None):
        readonly = ["status", "obs_producao", "created_by", "created_at", "updated_at"]
        if obj is not None:
            readonly += ["order_type", "budget"]
        return readonly
