# stocks/management/commands/verifier_alertes_stock.py

from django.core.management.base import BaseCommand

from stocks.services.alertes import verifier_alertes


class Command(BaseCommand):
    help = "Crée, met à jour ou résout les alertes de stock bas / rupture"

    def add_arguments(self, parser):
        parser.add_argument("--depot", type=int, default=None)

    def handle(self, *args, **options):
        compteurs = verifier_alertes(depot_id=options["depot"])

        self.stdout.write(
            self.style.SUCCESS(
                f"Alertes créées : {compteurs['creees']} | "
                f"mises à jour : {compteurs['mises_a_jour']} | "
                f"résolues : {compteurs['resolues']}"
            )
        )
