# referentiel/models.py

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q

from referentiel.constants import Devise, DEVISE_PAR_DEFAUT, KG_PAR_CARTON_DEFAUT


class Depot(models.Model):
    code = models.CharField(max_length=20, unique=True)
    intitule = models.CharField(max_length=150)
    adresse = models.TextField(blank=True)
    actif = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["code"]
        verbose_name = "Dépôt"
        verbose_name_plural = "Dépôts"

    def __str__(self):
        return self.intitule


class Article(models.Model):
    """
    Article poisson (espèce / spécification / taille).

    Le facteur de conditionnement (kg par carton) peut être corrigé
    même lorsque des lots référencent déjà l'article.
    """

    reference = models.CharField(max_length=50, unique=True)
    specification = models.CharField(max_length=100, blank=True)
    taille = models.CharField(max_length=50, blank=True)

    kg_par_carton = models.DecimalField(
        max_digits=10,
        decimal_places=3,
        default=KG_PAR_CARTON_DEFAUT,
        validators=[MinValueValidator(Decimal("0.001"))],
        help_text="Poids net d'un carton (kg)"
    )

    # Prix de référence SMCP (par tonne)
    cout_reference = models.DecimalField(
        max_digits=14,
        decimal_places=4,
        default=Decimal("0"),
    )
    devise_cout_reference = models.CharField(
        max_length=3,
        choices=Devise.choices,
        default=DEVISE_PAR_DEFAUT
    )

    actif = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["reference"]
        constraints = [
            models.CheckConstraint(
                condition=Q(kg_par_carton__gt=0),
                name="article_kg_par_carton_positif",
            ),
        ]

    def __str__(self):
        return self.libelle

    @property
    def libelle(self):
        parts = [self.reference, self.specification, self.taille]
        return " - ".join(p for p in parts if p)
