# stocks/models_stock/alerte.py

from django.db import models
from django.db.models import Q

from stocks.constants import TypeAlerte, StatutAlerte


class AlerteStock(models.Model):

    depot = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.PROTECT,
        related_name="alertes_stock"
    )
    article = models.ForeignKey(
        "referentiel.Article",
        on_delete=models.PROTECT,
        related_name="alertes_stock"
    )

    type_alerte = models.CharField(max_length=20, choices=TypeAlerte.choices)
    statut = models.CharField(
        max_length=20,
        choices=StatutAlerte.choices,
        default=StatutAlerte.ACTIVE
    )

    quantite_actuelle_kg = models.DecimalField(max_digits=14, decimal_places=3)
    seuil_alerte_kg = models.DecimalField(max_digits=14, decimal_places=3)
    message = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    resolue_le = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-updated_at", "-id"]
        constraints = [
            models.UniqueConstraint(
                fields=["depot", "article"],
                condition=Q(statut=StatutAlerte.ACTIVE),
                name="unique_alerte_active_par_position",
            ),
        ]

    def __str__(self):
        return f"{self.get_type_alerte_display()} - {self.article}"
