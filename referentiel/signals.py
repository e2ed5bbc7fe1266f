# referentiel/signals.py

from django.db.models.signals import post_save
from django.dispatch import receiver

from referentiel.models import Article


@receiver(post_save, sender=Article)
def invalider_fiche_article(sender, instance, created, **kwargs):
    """
    Correction du conditionnement : la fiche en cache doit être relue.
    """
    if created:
        return

    from django.apps import apps

    config = apps.get_app_config("stocks")
    catalogue = getattr(config, "catalogue", None)
    if catalogue is not None:
        catalogue.invalider(instance.pk)
