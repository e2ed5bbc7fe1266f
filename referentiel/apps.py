from django.apps import AppConfig


class ReferentielConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "referentiel"
    verbose_name = "Référentiel articles / dépôts"

    def ready(self):
        from referentiel import signals  # noqa: F401
