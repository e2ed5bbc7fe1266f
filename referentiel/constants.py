# referentiel/constants.py

from decimal import Decimal

from django.db import models


class Devise(models.TextChoices):
    MRU = "MRU", "Ouguiya (MRU)"
    EUR = "EUR", "Euro"
    USD = "USD", "Dollar US"


DEVISE_PAR_DEFAUT = Devise.MRU

# Conditionnement standard d'un carton de poisson congelé
KG_PAR_CARTON_DEFAUT = Decimal("20")
