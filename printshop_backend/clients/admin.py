# clients/admin.py

from django.contrib import admin

from clients.models import Client, ProductionCenter


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    list_display = ("name", "cnpj_cpf", "email", "phone", "active")
    list_filter = ("active",)
    search_fields = ("name", "cnpj_cpf", "email")


@admin.register(ProductionCenter)
class ProductionCenterAdmin(admin.ModelAdmin):
    list_display = ("name", "type", "active")
    list_filter = ("type", "active")
    search_fields = ("name",)
