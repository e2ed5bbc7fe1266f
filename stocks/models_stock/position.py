# stocks/models_stock/position.py

from decimal import Decimal

from django.db import models
from django.db.models import F, Q

from referentiel.constants import Devise


class PositionStock(models.Model):
    """
    Position de stock par couple (dépôt, article).

    Maintenue incrémentalement par le moteur de mouvements, jamais
    recalculée par balayage. Créée au premier mouvement, conservée à zéro.

    valeur_stock = Σ (restant × cout_unitaire_position) des lots du couple,
    cout_moyen_unitaire = valeur_stock / quantite_kg (CUMP par kg).
    """

    depot = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.PROTECT,
        related_name="positions"
    )
    article = models.ForeignKey(
        "referentiel.Article",
        on_delete=models.PROTECT,
        related_name="positions"
    )

    quantite_kg = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )
    quantite_commercialisable_kg = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )

    valeur_stock = models.DecimalField(
        max_digits=28, decimal_places=9, default=Decimal("0")
    )
    cout_moyen_unitaire = models.DecimalField(
        max_digits=20, decimal_places=6, default=Decimal("0")
    )
    # Vide tant qu'aucun lot n'est entré
    devise = models.CharField(
        max_length=3,
        choices=Devise.choices,
        blank=True
    )

    seuil_alerte_kg = models.DecimalField(
        max_digits=14, decimal_places=3, default=Decimal("0")
    )

    version = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["depot_id", "article_id"]
        constraints = [
            models.UniqueConstraint(
                fields=["depot", "article"],
                name="unique_position_depot_article",
            ),
            models.CheckConstraint(
                condition=Q(quantite_commercialisable_kg__gte=0),
                name="position_commercialisable_positive",
            ),
            models.CheckConstraint(
                condition=Q(quantite_commercialisable_kg__lte=F("quantite_kg")),
                name="position_commercialisable_inferieure_quantite",
            ),
        ]

    def __str__(self):
        return f"{self.article} @ {self.depot} : {self.quantite_kg} kg"

    @property
    def quantite_non_commercialisable_kg(self):
        return self.quantite_kg - self.quantite_commercialisable_kg

    @property
    def en_alerte(self):
        return (
            self.seuil_alerte_kg > 0
            and self.quantite_kg <= self.seuil_alerte_kg
        )
