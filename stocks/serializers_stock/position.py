# stocks/serializers_stock/position.py

from rest_framework import serializers

from stocks.serializers_stock.mouvement import SelectionLotSerializer
from referentiel.constants import Devise


class QuantitesSerializer(serializers.Serializer):
    kg = serializers.DecimalField(max_digits=14, decimal_places=3)
    tonnes = serializers.DecimalField(max_digits=14, decimal_places=3)
    cartons = serializers.DecimalField(max_digits=16, decimal_places=2)


class VuePositionSerializer(serializers.Serializer):
    """
    Sérialise les vues calculées par l'agrégateur (dicts).
    """

    depot_id = serializers.IntegerField()
    depot = serializers.CharField()
    article_id = serializers.IntegerField()
    article = serializers.CharField()
    kg_par_carton = serializers.DecimalField(max_digits=10, decimal_places=3)
    devise = serializers.CharField()
    devise_position = serializers.CharField()

    disponible = QuantitesSerializer()
    commercialisable = QuantitesSerializer()
    non_commercialisable_kg = serializers.DecimalField(max_digits=14, decimal_places=3)

    cump_kg = serializers.DecimalField(max_digits=20, decimal_places=6)
    cump_tonne = serializers.DecimalField(max_digits=22, decimal_places=2)
    valeur = serializers.DecimalField(max_digits=24, decimal_places=2)

    seuil_alerte_kg = serializers.DecimalField(max_digits=14, decimal_places=3)
    en_alerte = serializers.BooleanField()
    version = serializers.IntegerField()
    updated_at = serializers.DateTimeField()


class SyntheseArticleSerializer(serializers.Serializer):
    article_id = serializers.IntegerField()
    article = serializers.CharField()
    devise = serializers.CharField()
    nb_depots = serializers.IntegerField()
    quantite_kg = serializers.DecimalField(max_digits=16, decimal_places=3)
    quantite_commercialisable_kg = serializers.DecimalField(max_digits=16, decimal_places=3)
    tonnes = serializers.DecimalField(max_digits=16, decimal_places=3)
    cartons = serializers.DecimalField(max_digits=18, decimal_places=2)
    cump_kg = serializers.DecimalField(max_digits=20, decimal_places=6)
    cump_tonne = serializers.DecimalField(max_digits=22, decimal_places=2)
    valeur = serializers.DecimalField(max_digits=24, decimal_places=2)


# ============================================================
# ÉCRITURE
# ============================================================

class AjustementPositionSerializer(serializers.Serializer):
    depot = serializers.IntegerField()
    article = serializers.IntegerField()
    delta_kg = serializers.DecimalField(max_digits=14, decimal_places=3)
    lots = SelectionLotSerializer(many=True, required=False)
    cout_unitaire = serializers.DecimalField(max_digits=18, decimal_places=6, required=False)
    devise = serializers.ChoiceField(choices=Devise.choices, required=False)
    motif = serializers.CharField(required=False, allow_blank=True, default="")


class AjustementCommercialisableSerializer(serializers.Serializer):
    depot = serializers.IntegerField()
    article = serializers.IntegerField()
    delta_kg = serializers.DecimalField(max_digits=14, decimal_places=3)
    motif = serializers.CharField(required=False, allow_blank=True, default="")


class SeuilAlerteSerializer(serializers.Serializer):
    depot = serializers.IntegerField()
    article = serializers.IntegerField()
    seuil_alerte_kg = serializers.DecimalField(max_digits=14, decimal_places=3, min_value=0)
