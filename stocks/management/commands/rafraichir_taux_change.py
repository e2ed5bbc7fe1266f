# stocks/management/commands/rafraichir_taux_change.py

from django.apps import apps
from django.core.management.base import BaseCommand


class Command(BaseCommand):
    help = "Recharge les taux de change du jour auprès du fournisseur"

    def handle(self, *args, **options):
        entree = apps.get_app_config("stocks").taux.rafraichir()

        for devise, valeur in sorted(entree["taux"].items()):
            self.stdout.write(f"{devise} : {valeur}")

        if entree["source"] == "fournisseur":
            self.stdout.write(
                self.style.SUCCESS(f"Taux du {entree['jour']} chargés")
            )
        else:
            self.stdout.write(
                self.style.WARNING(
                    f"Fournisseur indisponible, taux {entree['source']} utilisés"
                )
            )
