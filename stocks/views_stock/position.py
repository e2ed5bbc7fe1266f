# stocks/views_stock/position.py

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from accounts.permissions import CanAdjustStock, IsStockActor
from stocks.serializers_stock.position import (
    AjustementCommercialisableSerializer,
    AjustementPositionSerializer,
    SeuilAlerteSerializer,
    SyntheseArticleSerializer,
    VuePositionSerializer,
)
from stocks.services.alertes import definir_seuil
from stocks.views_stock.commun import devise_demandee, entier_optionnel, services


class PositionStockViewSet(viewsets.ViewSet):
    """
    Positions de stock par dépôt / article.

    - GET  positions/                 : vues disponible / commercialisable
    - GET  positions/globales/        : synthèse par article tous dépôts
    - POST positions/ajuster/         : ajustement manuel (+ / -)
    - POST positions/commercialisable/: quarantaine
    - POST positions/seuil/           : seuil d'alerte
    """

    ACTIONS_AJUSTEMENT = ("ajuster", "commercialisable", "seuil")

    def get_permissions(self):
        if self.action in self.ACTIONS_AJUSTEMENT:
            return [CanAdjustStock()]
        return [IsStockActor()]

    def _vue(self, position, request):
        config = services()
        position = config.agregateur.positions_par_id([position.pk])[0]
        vue = config.agregateur.vue_position(position, devise_demandee(request))
        return VuePositionSerializer(vue).data

    def list(self, request):
        vues = services().agregateur.vues(
            devise_demandee(request),
            depot_id=entier_optionnel(request, "depot"),
            article_id=entier_optionnel(request, "article"),
        )
        return Response(VuePositionSerializer(vues, many=True).data)

    @action(detail=False, methods=["get"])
    def globales(self, request):
        lignes = services().agregateur.synthese_globale(
            devise_demandee(request),
            depot_id=entier_optionnel(request, "depot"),
        )
        return Response(SyntheseArticleSerializer(lignes, many=True).data)

    @action(detail=False, methods=["post"])
    def ajuster(self, request):
        serializer = AjustementPositionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        position = services().moteur.ajuster_position(
            data["depot"],
            data["article"],
            data["delta_kg"],
            selection=[dict(s) for s in data.get("lots", [])],
            cout_unitaire=data.get("cout_unitaire"),
            devise=data.get("devise"),
            motif=data.get("motif", ""),
            utilisateur=request.user,
        )
        return Response(self._vue(position, request))

    @action(detail=False, methods=["post"])
    def commercialisable(self, request):
        serializer = AjustementCommercialisableSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        position = services().moteur.ajuster_commercialisable(
            data["depot"],
            data["article"],
            data["delta_kg"],
            motif=data.get("motif", ""),
            utilisateur=request.user,
        )
        return Response(self._vue(position, request))

    @action(detail=False, methods=["post"])
    def seuil(self, request):
        serializer = SeuilAlerteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        config = services()
        config.depots.get_depot(data["depot"])
        config.catalogue.get_article(data["article"])

        position = definir_seuil(data["depot"], data["article"], data["seuil_alerte_kg"])
        return Response(self._vue(position, request))
