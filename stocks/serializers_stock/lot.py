# stocks/serializers_stock/lot.py

from rest_framework import serializers

from stocks.constants import MONTANT_QUANTUM
from stocks.models_stock.lot import Lot
from stocks.services.conversion import cartons_depuis_kg


class LotSerializer(serializers.ModelSerializer):

    article_reference = serializers.CharField(
        source="article.reference",
        read_only=True
    )

    depot_code = serializers.CharField(
        source="depot.code",
        read_only=True
    )

    cartons_restants = serializers.SerializerMethodField()

    class Meta:
        model = Lot
        fields = [
            "id",
            "numero_lot",
            "article",
            "article_reference",
            "depot",
            "depot_code",
            "quantite_initiale_kg",
            "quantite_restante_kg",
            "cartons_restants",
            "cout_unitaire",
            "devise",
            "cout_unitaire_position",
            "lot_origine",
            "created_at",
        ]
        read_only_fields = fields

    def get_cartons_restants(self, obj):
        cartons = cartons_depuis_kg(obj.quantite_restante_kg, obj.article.kg_par_carton)
        return str(cartons.quantize(MONTANT_QUANTUM))
