# clients/models/client.py

from django.db import models


class Client(models.Model):
    """
    Customer that budgets and orders are quoted/produced for.

    Reference data only: the workflow reads it (active flag, safe
    projection fields) and never writes it.
    """

    name = models.CharField(max_length=255)
    cnpj_cpf = models.CharField(max_length=20, db_index=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)

    active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name
