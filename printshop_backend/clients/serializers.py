# clients/serializers.py

from rest_framework import serializers

from clients.models import Client, ProductionCenter


class ClientSerializer(serializers.ModelSerializer):
    """
    Full client record as embedded in budget/order payloads.
    Role-based projection happens later in the sanitizer.
    """

    class Meta:
        model = Client
        fields = [
            "id",
            "name",
            "cnpj_cpf",
            "email",
            "phone",
            "address",
            "active",
        ]
        read_only_fields = fields


class ProductionCenterSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductionCenter
        fields = [
            "id",
            "name",
            "type",
            "obs",
            "active",
        ]
        read_only_fields = fields
