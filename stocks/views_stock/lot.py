# stocks/views_stock/lot.py

from rest_framework.viewsets import ReadOnlyModelViewSet

from accounts.permissions import IsStockActor
from stocks.filters import LotFilter
from stocks.models_stock.lot import Lot
from stocks.pagination import StandardResultsSetPagination
from stocks.serializers_stock.lot import LotSerializer


class LotViewSet(ReadOnlyModelViewSet):
    """
    Lots d'un article / dépôt, du plus ancien au plus récent.
    Par défaut seuls les lots avec du restant sont listés.
    """

    serializer_class = LotSerializer
    permission_classes = [IsStockActor]
    pagination_class = StandardResultsSetPagination
    filterset_class = LotFilter
    ordering_fields = ["created_at", "quantite_restante_kg"]

    def get_queryset(self):
        qs = Lot.objects.select_related("article", "depot").order_by("created_at", "id")

        if "disponible" not in self.request.query_params and self.action == "list":
            qs = qs.filter(quantite_restante_kg__gt=0)

        return qs
