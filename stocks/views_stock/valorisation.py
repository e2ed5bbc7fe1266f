# stocks/views_stock/valorisation.py

from django.conf import settings
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import CanAdjustStock, CanReadStock, IsStockActor
from stocks.exceptions import ErreurValidation
from stocks.models_stock.position import PositionStock
from stocks.serializers_stock.valorisation import (
    CoutRevientRequestSerializer,
    CoutRevientSerializer,
)
from stocks.services.cout_revient import ParametresCoutRevient, calculer_cout_revient
from stocks.views_stock.commun import devise_demandee, entier_optionnel, services


class ValorisationView(APIView):
    """
    Valeur d'un couple dépôt / article au niveau des lots, dans la devise demandée.
    """

    permission_classes = [IsStockActor]

    def get(self, request):
        depot_id = entier_optionnel(request, "depot")
        article_id = entier_optionnel(request, "article")
        if depot_id is None or article_id is None:
            raise ErreurValidation("Paramètres depot et article obligatoires.", champ="depot")

        devise = devise_demandee(request)
        config = services()

        return Response({
            "depot_id": depot_id,
            "article_id": article_id,
            "devise": devise,
            "valeur": str(config.agregateur.valeur(depot_id, article_id, devise)),
        })


class CoutRevientView(APIView):
    """
    Calculateur de coût de revient par tonne (sans effet sur le stock).
    """

    permission_classes = [CanReadStock]

    def post(self, request):
        serializer = CoutRevientRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        config = services()
        fiche = config.catalogue.get_article(data["article"])
        devise = data.get("devise") or devise_demandee(request)

        if "prix_smcp" in data:
            prix_smcp, devise_smcp = data["prix_smcp"], fiche.devise_cout_reference
        elif fiche.cout_reference > 0:
            prix_smcp, devise_smcp = fiche.cout_reference, fiche.devise_cout_reference
        else:
            defauts = settings.COUT_REVIENT_DEFAUTS
            prix_smcp = defauts.get("SMCP_DEFAUT", "0")
            devise_smcp = defauts.get("DEVISE_FRAIS", "MRU")

        parametres = ParametresCoutRevient.depuis_settings(
            frais_conteneur=data.get("frais_conteneur"),
            tonnes_par_conteneur=data.get("tonnes_par_conteneur"),
            fret_par_tonne=data.get("fret_par_tonne"),
            taux_retenue_pct=data.get("taux_retenue_pct"),
        )

        taux = config.taux.get_taux()
        position = PositionStock.objects.filter(
            depot_id=data["depot"], article_id=data["article"]
        ).first()
        cump_par_tonne = (
            config.valorisation.cump_par_tonne(position, devise, taux) if position else 0
        )

        resultat = calculer_cout_revient(
            prix_smcp, devise_smcp, cump_par_tonne, devise, taux, parametres
        )
        return Response(CoutRevientSerializer(resultat).data)


def _table_taux(entree):
    return {
        "jour": entree["jour"],
        "source": entree["source"],
        "taux": {devise: str(valeur) for devise, valeur in entree["taux"].items()},
    }


class TauxChangeView(APIView):
    """
    Table du jour (base USD) et sa provenance : fournisseur,
    dernier_connu ou secours.
    """

    permission_classes = [IsStockActor]

    def get(self, request):
        return Response(_table_taux(services().taux.consulter()))


class RafraichirTauxChangeView(APIView):
    permission_classes = [CanAdjustStock]

    def post(self, request):
        return Response(_table_taux(services().taux.rafraichir()))
