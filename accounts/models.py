from django.db import models
from django.contrib.auth.models import AbstractUser

from accounts.constants import UserRole


class Utilisateur(AbstractUser):
    role = models.CharField(
        max_length=30,
        choices=UserRole.CHOICES,
        default=UserRole.LECTEUR
    )
    depot = models.ForeignKey(
        "referentiel.Depot",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Dépôt de rattachement (magasinier)"
    )
