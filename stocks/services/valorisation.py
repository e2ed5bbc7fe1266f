# stocks/services/valorisation.py
"""
Valorisation du stock : CUMP et conversions multi-devises.

CUMP maintenu en O(1) par ligne à travers valeur_stock :

    entrée  : valeur += q × base de coût du lot
    sortie  : valeur -= q × base de coût du lot consommé
    CUMP    = valeur / quantité

Une sortie retire exactement la base de coût du lot qu'elle draine :
le CUMP stocké reste égal au CUMP recalculé sur les lots restants,
quel que soit l'ordre des opérations.
"""

from decimal import Decimal, ROUND_HALF_UP

from django.db.models import DecimalField, ExpressionWrapper, F, Sum

from stocks.constants import CUMP_QUANTUM, KG_PAR_TONNE, MONTANT_QUANTUM, VALEUR_QUANTUM
from stocks.models_stock.lot import Lot
from stocks.services.taux_change import facteur_conversion


def arrondir_cump(valeur):
    return Decimal(valeur).quantize(CUMP_QUANTUM, rounding=ROUND_HALF_UP)


def arrondir_montant(valeur):
    return Decimal(valeur).quantize(MONTANT_QUANTUM, rounding=ROUND_HALF_UP)


# ============================================================
# BASE DE COÛT
# ============================================================

def base_de_cout(position, cout_unitaire, devise_lot, taux):
    """
    Coût unitaire exprimé dans la devise de la position.

    La première entrée fixe la devise de la position. Un lot dans une
    autre devise est converti au taux du jour, figé à la création du lot.
    """
    if not position.devise:
        position.devise = devise_lot

    if devise_lot == position.devise:
        return arrondir_cump(cout_unitaire)

    facteur = facteur_conversion(taux, devise_lot, position.devise)
    return arrondir_cump(Decimal(cout_unitaire) * facteur)


# ============================================================
# MISE À JOUR DE LA POSITION (en mémoire, sauvegardée par l'appelant)
# ============================================================

def _recalculer_cump(position):
    if position.quantite_kg > 0:
        position.cout_moyen_unitaire = arrondir_cump(
            position.valeur_stock / position.quantite_kg
        )


def entrer_en_position(position, quantite_kg, cout_base):
    """
    new = (old × oldQty + cout × q) / (oldQty + q)
    """
    position.quantite_kg = position.quantite_kg + quantite_kg
    position.valeur_stock = (
        position.valeur_stock + quantite_kg * cout_base
    ).quantize(VALEUR_QUANTUM)
    _recalculer_cump(position)


def sortir_de_position(position, quantite_kg, cout_base):
    position.quantite_kg = position.quantite_kg - quantite_kg

    if position.quantite_kg == 0:
        # Dernier CUMP conservé pour l'affichage
        position.valeur_stock = Decimal("0")
        return

    position.valeur_stock = (
        position.valeur_stock - quantite_kg * cout_base
    ).quantize(VALEUR_QUANTUM)
    _recalculer_cump(position)


def cump_lots(lots):
    """
    CUMP recalculé sur des lots (restant × base de coût).
    """
    quantite = Decimal("0")
    valeur = Decimal("0")
    for lot in lots:
        quantite += lot.quantite_restante_kg
        valeur += lot.quantite_restante_kg * lot.cout_unitaire_position

    if quantite <= 0:
        return Decimal("0")
    return arrondir_cump(valeur / quantite)


# ============================================================
# VALORISATION MULTI-DEVISES
# ============================================================

class ServiceValorisation:

    def __init__(self, taux):
        self.taux = taux

    def valeur(self, depot_id, article_id, devise, jour=None):
        """
        Valeur au niveau des lots :
        Σ (restant × coût d'achat) × taux[devise] / taux[devise du lot]
        """
        table = self.taux.get_taux(jour)

        montants = (
            Lot.objects
            .filter(
                depot_id=depot_id,
                article_id=article_id,
                quantite_restante_kg__gt=0,
            )
            .values("devise")
            .order_by()
            .annotate(
                montant=Sum(
                    ExpressionWrapper(
                        F("quantite_restante_kg") * F("cout_unitaire"),
                        output_field=DecimalField(max_digits=32, decimal_places=9),
                    )
                )
            )
        )

        total = Decimal("0")
        for ligne in montants:
            montant = Decimal(str(ligne["montant"] or 0))
            total += montant * facteur_conversion(table, ligne["devise"], devise)

        return arrondir_montant(total)

    def valeur_position(self, position, devise, taux=None):
        if position.quantite_kg <= 0 or not position.devise:
            return Decimal("0.00")

        table = taux if taux is not None else self.taux.get_taux()
        return arrondir_montant(
            position.valeur_stock * facteur_conversion(table, position.devise, devise)
        )

    def cump_en_devise(self, position, devise, taux=None):
        if not position.devise:
            return Decimal("0")

        table = taux if taux is not None else self.taux.get_taux()
        return arrondir_cump(
            position.cout_moyen_unitaire * facteur_conversion(table, position.devise, devise)
        )

    def cump_par_tonne(self, position, devise, taux=None):
        return arrondir_montant(self.cump_en_devise(position, devise, taux) * KG_PAR_TONNE)
