# stocks/services/agregation.py
"""
Vues de reporting construites sur les positions (lecture sans verrou).
"""

from collections import OrderedDict
from decimal import Decimal

from stocks.constants import KG_PAR_TONNE, MONTANT_QUANTUM
from stocks.models_stock.position import PositionStock
from stocks.services.conversion import cartons_depuis_kg, tonnes_depuis_kg
from stocks.services.taux_change import facteur_conversion
from stocks.services.valorisation import arrondir_cump, arrondir_montant


def _quantites(quantite_kg, kg_par_carton):
    return {
        "kg": quantite_kg,
        "tonnes": tonnes_depuis_kg(quantite_kg).quantize(Decimal("0.001")),
        "cartons": cartons_depuis_kg(quantite_kg, kg_par_carton).quantize(MONTANT_QUANTUM),
    }


class AgregateurStock:

    def __init__(self, valorisation, taux):
        self.valorisation = valorisation
        self.taux = taux

    def positions(self, depot_id=None, article_id=None):
        qs = PositionStock.objects.select_related("depot", "article")

        if depot_id:
            qs = qs.filter(depot_id=depot_id)
        if article_id:
            qs = qs.filter(article_id=article_id)

        return list(qs.order_by("depot__code", "article__reference"))

    def positions_par_id(self, position_ids):
        return list(
            PositionStock.objects
            .select_related("depot", "article")
            .filter(pk__in=position_ids)
            .order_by("depot__code", "article__reference")
        )

    # ============================================================
    # VUE PAR POSITION
    # ============================================================

    def vue_position(self, position, devise, taux=None):
        """
        Vues "disponible" (total) et "commercialisable" côte à côte,
        en kg / tonnes / cartons, CUMP et valeur convertis dans `devise`.
        """
        table = taux if taux is not None else self.taux.get_taux()
        kg_par_carton = position.article.kg_par_carton

        return {
            "depot_id": position.depot_id,
            "depot": position.depot.intitule,
            "article_id": position.article_id,
            "article": position.article.libelle,
            "kg_par_carton": kg_par_carton,
            "devise": devise,
            "devise_position": position.devise,
            "disponible": _quantites(position.quantite_kg, kg_par_carton),
            "commercialisable": _quantites(position.quantite_commercialisable_kg, kg_par_carton),
            "non_commercialisable_kg": position.quantite_non_commercialisable_kg,
            "cump_kg": self.valorisation.cump_en_devise(position, devise, table),
            "cump_tonne": self.valorisation.cump_par_tonne(position, devise, table),
            "valeur": self.valorisation.valeur_position(position, devise, table),
            "seuil_alerte_kg": position.seuil_alerte_kg,
            "en_alerte": position.en_alerte,
            "version": position.version,
            "updated_at": position.updated_at,
        }

    def vues(self, devise, depot_id=None, article_id=None):
        table = self.taux.get_taux()
        return [
            self.vue_position(position, devise, table)
            for position in self.positions(depot_id=depot_id, article_id=article_id)
        ]

    # ============================================================
    # SYNTHÈSE GLOBALE PAR ARTICLE
    # ============================================================

    def synthese_globale(self, devise, depot_id=None):
        """
        Par article, tous dépôts confondus :
        quantité = Σ q_i ; CUMP global = Σ(q_i × cump_i × fx_i) / Σ q_i
        """
        table = self.taux.get_taux()
        articles = OrderedDict()

        for position in self.positions(depot_id=depot_id):
            ligne = articles.setdefault(
                position.article_id,
                {
                    "article_id": position.article_id,
                    "article": position.article.libelle,
                    "kg_par_carton": position.article.kg_par_carton,
                    "devise": devise,
                    "quantite_kg": Decimal("0"),
                    "quantite_commercialisable_kg": Decimal("0"),
                    "valeur": Decimal("0"),
                    "nb_depots": 0,
                },
            )

            ligne["quantite_kg"] += position.quantite_kg
            ligne["quantite_commercialisable_kg"] += position.quantite_commercialisable_kg
            if position.quantite_kg > 0:
                ligne["nb_depots"] += 1
                ligne["valeur"] += (
                    position.quantite_kg
                    * position.cout_moyen_unitaire
                    * facteur_conversion(table, position.devise, devise)
                )

        resultat = []
        for ligne in articles.values():
            quantite = ligne["quantite_kg"]
            cump = arrondir_cump(ligne["valeur"] / quantite) if quantite > 0 else Decimal("0")

            ligne.update({
                "cump_kg": cump,
                "cump_tonne": arrondir_montant(cump * KG_PAR_TONNE),
                "valeur": arrondir_montant(ligne["valeur"]),
                "tonnes": tonnes_depuis_kg(quantite).quantize(Decimal("0.001")),
                "cartons": cartons_depuis_kg(quantite, ligne["kg_par_carton"]).quantize(MONTANT_QUANTUM),
            })
            resultat.append(ligne)

        return resultat

    def valeur(self, depot_id, article_id, devise):
        return self.valorisation.valeur(depot_id, article_id, devise)
