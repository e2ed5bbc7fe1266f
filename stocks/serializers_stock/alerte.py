# stocks/serializers_stock/alerte.py

from rest_framework import serializers

from stocks.models_stock.alerte import AlerteStock


class AlerteStockSerializer(serializers.ModelSerializer):

    article_reference = serializers.CharField(
        source="article.reference",
        read_only=True
    )

    depot_code = serializers.CharField(
        source="depot.code",
        read_only=True
    )

    class Meta:
        model = AlerteStock
        fields = [
            "id",
            "depot",
            "depot_code",
            "article",
            "article_reference",
            "type_alerte",
            "statut",
            "quantite_actuelle_kg",
            "seuil_alerte_kg",
            "message",
            "created_at",
            "updated_at",
            "resolue_le",
        ]
        read_only_fields = fields
