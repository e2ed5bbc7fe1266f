# stocks/models_stock/lot.py

from django.db import models
from django.db.models import F, Q
from django.utils import timezone

from referentiel.constants import Devise, DEVISE_PAR_DEFAUT


class Lot(models.Model):
    """
    Lot physique (unité d'allocation).

    Créé uniquement par une ligne qui augmente le stock (entrée,
    transfert côté destination, ajustement positif). Jamais supprimé :
    seule la quantité restante diminue, jusqu'à zéro.
    """

    article = models.ForeignKey(
        "referentiel.Article",
        on_delete=models.PROTECT,
        related_name="lots"
    )
    depot = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.PROTECT,
        related_name="lots"
    )

    numero_lot = models.CharField(
        max_length=80,
        help_text="Numéro de lot (ex: LOT-POULPE-20240115-01)"
    )

    quantite_initiale_kg = models.DecimalField(max_digits=14, decimal_places=3)
    quantite_restante_kg = models.DecimalField(max_digits=14, decimal_places=3)

    # Coût d'achat par kg, dans la devise du lot
    cout_unitaire = models.DecimalField(max_digits=18, decimal_places=6)
    devise = models.CharField(
        max_length=3,
        choices=Devise.choices,
        default=DEVISE_PAR_DEFAUT
    )

    # Base de coût figée dans la devise de la position au moment de la création
    cout_unitaire_position = models.DecimalField(max_digits=18, decimal_places=6)

    lot_origine = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="lots_derives",
        help_text="Lot source (transfert inter-dépôts)"
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["article", "depot", "created_at"],
                name="lot_fifo_idx",
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(quantite_initiale_kg__gt=0),
                name="lot_quantite_initiale_positive",
            ),
            models.CheckConstraint(
                condition=Q(quantite_restante_kg__gte=0),
                name="lot_quantite_restante_positive",
            ),
            models.CheckConstraint(
                condition=Q(quantite_restante_kg__lte=F("quantite_initiale_kg")),
                name="lot_restante_inferieure_initiale",
            ),
            models.CheckConstraint(
                condition=Q(cout_unitaire__gte=0),
                name="lot_cout_unitaire_positif",
            ),
        ]

    def __str__(self):
        return f"{self.numero_lot} ({self.quantite_restante_kg} kg)"

    @property
    def epuise(self):
        return self.quantite_restante_kg <= 0

    def _generate_numero_lot(self):
        """
        Génère automatiquement un numéro :
        LOT-{REFERENCE_ARTICLE}-{AAAAMMJJ}-{NN}

        Compteur par article et par jour.
        """
        jour = timezone.localdate().strftime("%Y%m%d")
        prefix = f"LOT-{self.article.reference}-{jour}-"

        last = (
            Lot.objects
            .filter(
                article_id=self.article_id,
                numero_lot__startswith=prefix,
            )
            .order_by("-id")
            .first()
        )

        if last:
            try:
                next_number = int(last.numero_lot.split("-")[-1]) + 1
            except (ValueError, IndexError):
                next_number = 1
        else:
            next_number = 1

        return f"{prefix}{str(next_number).zfill(2)}"

    def save(self, *args, **kwargs):
        if not self.numero_lot:
            self.numero_lot = self._generate_numero_lot()

        super().save(*args, **kwargs)
