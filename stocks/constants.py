# stocks/constants.py

from decimal import Decimal

from django.db import models


class TypeMouvement(models.TextChoices):
    ENTREE = "ENTREE", "Entrée"
    TRANSFERT = "TRANSFERT", "Transfert"
    SORTIE = "SORTIE", "Sortie"
    AJUSTEMENT = "AJUSTEMENT", "Ajustement"
    AJUSTEMENT_COMMERCIALISABLE = "AJUSTEMENT_COMMERCIALISABLE", "Ajustement commercialisable"


class Sens(models.TextChoices):
    ENTREE = "ENTREE", "Entrée"
    SORTIE = "SORTIE", "Sortie"


class StatutMouvement(models.TextChoices):
    BROUILLON = "BROUILLON", "Brouillon"
    VALIDE = "VALIDE", "Validé"
    APPLIQUE = "APPLIQUE", "Appliqué"
    REJETE = "REJETE", "Rejeté"


ALLOWED_TRANSITIONS = {
    StatutMouvement.BROUILLON: [
        StatutMouvement.VALIDE,
        StatutMouvement.REJETE,
    ],
    StatutMouvement.VALIDE: [
        StatutMouvement.APPLIQUE,
        StatutMouvement.REJETE,
    ],
    StatutMouvement.APPLIQUE: [],
    StatutMouvement.REJETE: [],
}


class TypeAlerte(models.TextChoices):
    STOCK_BAS = "STOCK_BAS", "Stock bas"
    RUPTURE = "RUPTURE", "Rupture de stock"


class StatutAlerte(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    IGNOREE = "IGNOREE", "Ignorée"
    RESOLUE = "RESOLUE", "Résolue"


# Écart toléré entre la somme des lots sélectionnés et la quantité demandée
TOLERANCE_CONSERVATION_KG = Decimal("0.01")

QUANTITE_QUANTUM = Decimal("0.001")
CUMP_QUANTUM = Decimal("0.000001")
VALEUR_QUANTUM = Decimal("0.000000001")
MONTANT_QUANTUM = Decimal("0.01")

KG_PAR_TONNE = Decimal("1000")
