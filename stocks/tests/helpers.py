from decimal import Decimal

from django.apps import apps

from stocks.models_stock.position import PositionStock
from stocks.services.commandes import Entree, LigneEntree


def moteur():
    return apps.get_app_config("stocks").moteur


def entrer(depot, article, quantite_kg, cout_unitaire, devise="MRU", **options):
    mouvement = Entree(
        depot_id=depot.pk,
        lignes=[
            LigneEntree(
                article_id=article.pk,
                quantite_kg=Decimal(str(quantite_kg)),
                cout_unitaire=Decimal(str(cout_unitaire)),
                devise=devise,
                **options,
            )
        ],
    )
    return moteur().appliquer(mouvement)


def position(depot, article):
    return PositionStock.objects.get(depot=depot, article=article)
