# stocks/models_stock/mouvement.py

from django.conf import settings
from django.db import models
from django.utils import timezone

from referentiel.constants import Devise
from stocks.constants import TypeMouvement, Sens


class MouvementStock(models.Model):
    """
    Journal des mouvements appliqués (append-only).
    Un mouvement appliqué ne se modifie pas : il se compense.
    """

    type_mouvement = models.CharField(
        max_length=30, choices=TypeMouvement.choices
    )

    depot_source = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="mouvements_sortants"
    )
    depot_destination = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="mouvements_entrants"
    )

    reference = models.CharField(max_length=100, blank=True)
    motif = models.TextField(blank=True)

    date_mouvement = models.DateTimeField(default=timezone.now)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="mouvements_stock"
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-date_mouvement", "-id"]

    def __str__(self):
        return f"{self.get_type_mouvement_display()} #{self.pk}"


class LigneMouvementStock(models.Model):

    mouvement = models.ForeignKey(
        MouvementStock,
        on_delete=models.CASCADE,
        related_name="lignes"
    )

    article = models.ForeignKey(
        "referentiel.Article",
        on_delete=models.PROTECT,
        related_name="lignes_mouvement"
    )
    depot = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.PROTECT,
        related_name="lignes_mouvement"
    )
    # Vide pour un ajustement commercialisable (aucun lot touché)
    lot = models.ForeignKey(
        "stocks.Lot",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="lignes_mouvement"
    )

    sens = models.CharField(max_length=10, choices=Sens.choices)
    quantite_kg = models.DecimalField(max_digits=14, decimal_places=3)

    cout_unitaire = models.DecimalField(
        max_digits=18, decimal_places=6, null=True, blank=True
    )
    devise = models.CharField(max_length=3, choices=Devise.choices, blank=True)

    class Meta:
        ordering = ["id"]
