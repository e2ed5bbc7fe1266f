# stocks/views_stock/alerte.py

from rest_framework.decorators import action
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounts.permissions import CanAdjustStock, IsStockActor
from stocks.filters import AlerteStockFilter
from stocks.models_stock.alerte import AlerteStock
from stocks.pagination import StandardResultsSetPagination
from stocks.serializers_stock.alerte import AlerteStockSerializer
from stocks.services.alertes import ignorer_alerte, verifier_alertes
from stocks.views_stock.commun import entier_optionnel


class AlerteStockViewSet(ReadOnlyModelViewSet):
    """
    Alertes stock bas / rupture.
    Par défaut seules les alertes actives sont listées.
    """

    serializer_class = AlerteStockSerializer
    pagination_class = StandardResultsSetPagination
    filterset_class = AlerteStockFilter

    def get_permissions(self):
        if self.action in ("verifier", "ignorer"):
            return [CanAdjustStock()]
        return [IsStockActor()]

    def get_queryset(self):
        qs = AlerteStock.objects.select_related("article", "depot")

        if "statut" not in self.request.query_params and self.action == "list":
            qs = qs.filter(statut="ACTIVE")

        return qs

    @action(detail=False, methods=["post"])
    def verifier(self, request):
        compteurs = verifier_alertes(depot_id=entier_optionnel(request, "depot"))
        return Response(compteurs)

    @action(detail=True, methods=["post"])
    def ignorer(self, request, pk=None):
        alerte = ignorer_alerte(self.get_object())
        return Response(self.get_serializer(alerte).data)
