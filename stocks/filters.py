# stocks/filters.py

import django_filters
from django.db.models import Q

from stocks.constants import StatutAlerte, TypeMouvement
from stocks.models_stock.alerte import AlerteStock
from stocks.models_stock.lot import Lot
from stocks.models_stock.mouvement import MouvementStock


class MouvementStockFilter(django_filters.FilterSet):
    """
    Historique des mouvements par article / dépôt / type.
    Un dépôt correspond à la source ou à la destination.
    """

    article = django_filters.NumberFilter(method="filter_article")
    depot = django_filters.NumberFilter(method="filter_depot")
    type_mouvement = django_filters.ChoiceFilter(choices=TypeMouvement.choices)
    date_debut = django_filters.IsoDateTimeFilter(field_name="date_mouvement", lookup_expr="gte")
    date_fin = django_filters.IsoDateTimeFilter(field_name="date_mouvement", lookup_expr="lte")

    class Meta:
        model = MouvementStock
        fields = ["article", "depot", "type_mouvement", "date_debut", "date_fin"]

    def filter_article(self, queryset, name, value):
        return queryset.filter(lignes__article_id=value).distinct()

    def filter_depot(self, queryset, name, value):
        return queryset.filter(
            Q(depot_source_id=value)
            | Q(depot_destination_id=value)
            | Q(lignes__depot_id=value)
        ).distinct()


class LotFilter(django_filters.FilterSet):
    disponible = django_filters.BooleanFilter(method="filter_disponible")

    class Meta:
        model = Lot
        fields = ["article", "depot", "devise", "disponible"]

    def filter_disponible(self, queryset, name, value):
        if value:
            return queryset.filter(quantite_restante_kg__gt=0)
        return queryset.filter(quantite_restante_kg=0)


class AlerteStockFilter(django_filters.FilterSet):
    statut = django_filters.ChoiceFilter(choices=StatutAlerte.choices)

    class Meta:
        model = AlerteStock
        fields = ["depot", "article", "type_alerte", "statut"]
