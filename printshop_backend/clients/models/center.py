# clients/models/center.py

from django.db import models


class ProductionCenter(models.Model):
    """
    Where a job is printed (in-house press, outsourced shop, digital, offset).
    """

    TYPE_INTERNAL = "Interno"
    TYPE_OUTSOURCED = "Terceirizado"
    TYPE_DIGITAL = "Digital"
    TYPE_OFFSET = "Offset"
    TYPE_OTHER = "Outro"

    TYPE_CHOICES = [
        (TYPE_INTERNAL, "Internal"),
        (TYPE_OUTSOURCED, "Outsourced"),
        (TYPE_DIGITAL, "Digital"),
        (TYPE_OFFSET, "Offset"),
        (TYPE_OTHER, "Other"),
    ]

    name = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default=TYPE_INTERNAL)
    obs = models.TextField(blank=True)

    active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return f"{self.name} ({self.type})"
