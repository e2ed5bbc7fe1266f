# stocks/views_stock/mouvement.py

from django.db.models import Q
from rest_framework import mixins, status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.response import Response

from accounts.constants import UserRole
from accounts.permissions import IsStockActor
from stocks.filters import MouvementStockFilter
from stocks.models_stock.mouvement import MouvementStock
from stocks.pagination import StandardResultsSetPagination
from stocks.serializers_stock.mouvement import (
    MouvementCommandeSerializer,
    MouvementStockSerializer,
)
from stocks.serializers_stock.position import VuePositionSerializer
from stocks.services.commandes import Transfert
from stocks.views_stock.commun import devise_demandee, services


class MouvementStockViewSet(mixins.CreateModelMixin, viewsets.ReadOnlyModelViewSet):
    """
    Journal des mouvements : lecture seule, append-only.
    POST applique un mouvement (ENTREE / TRANSFERT / SORTIE / AJUSTEMENT)
    de façon atomique.
    """

    queryset = (
        MouvementStock.objects
        .select_related("depot_source", "depot_destination", "created_by")
        .prefetch_related("lignes__article", "lignes__depot", "lignes__lot")
    )
    permission_classes = [IsStockActor]
    pagination_class = StandardResultsSetPagination
    filterset_class = MouvementStockFilter
    ordering_fields = ["date_mouvement", "created_at"]

    def get_queryset(self):
        user = self.request.user
        qs = super().get_queryset()

        # Magasinier : limité à son dépôt de rattachement
        if user.role == UserRole.MAGASINIER:
            if user.depot_id is None:
                return qs.none()
            return qs.filter(
                Q(depot_source_id=user.depot_id) | Q(depot_destination_id=user.depot_id)
            )

        return qs

    def get_serializer_class(self):
        if self.action == "create":
            return MouvementCommandeSerializer
        return MouvementStockSerializer

    @staticmethod
    def _verifier_depot(user, commande):
        if user.role != UserRole.MAGASINIER:
            return

        depot_id = (
            commande.depot_source_id if isinstance(commande, Transfert) else commande.depot_id
        )
        if user.depot_id is None or depot_id != user.depot_id:
            raise PermissionDenied("Un magasinier ne saisit que les mouvements de son dépôt.")

    def create(self, request, *args, **kwargs):
        config = services()

        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        commande = serializer.to_commande(config.catalogue)
        self._verifier_depot(request.user, commande)
        resultat = config.moteur.appliquer(commande, utilisateur=request.user)

        taux = config.taux.get_taux()
        devise = devise_demandee(request)
        positions = [
            config.agregateur.vue_position(position, devise, taux)
            for position in config.agregateur.positions_par_id(
                [p.pk for p in resultat.positions]
            )
        ]

        return Response(
            {
                "mouvement_id": resultat.mouvement_id,
                "statut": commande.statut,
                "positions": VuePositionSerializer(positions, many=True).data,
            },
            status=status.HTTP_201_CREATED,
        )
