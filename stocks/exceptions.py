# stocks/exceptions.py
"""
Erreurs métier du moteur de stock.

Toutes dérivent de ErreurStock (APIException DRF) : les services les
lèvent, DRF les rend en JSON avec un `code` stable et des champs
structurés (quantités en kg sous forme de chaînes décimales).
"""

from decimal import Decimal

from rest_framework import status
from rest_framework.exceptions import APIException


class ErreurStock(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Erreur de stock."
    default_code = "erreur_stock"

    def __init__(self, message=None, **contexte):
        self.message = message or self.default_detail
        self.contexte = contexte

        detail = {
            "detail": self.message,
            "code": self.default_code,
        }
        for cle, valeur in contexte.items():
            if valeur is not None:
                detail[cle] = valeur

        super().__init__(detail=detail, code=self.default_code)


class ErreurValidation(ErreurStock):
    default_detail = "Données invalides."
    default_code = "validation"

    def __init__(self, message=None, champ=None, erreurs=None):
        message = message or self.default_detail
        if erreurs is None:
            erreurs = [{"champ": champ, "message": message}]

        self.champ = champ
        self.erreurs = erreurs
        super().__init__(message, erreurs=erreurs)


class QuantiteLotInsuffisante(ErreurStock):
    default_detail = "Quantité restante du lot insuffisante."
    default_code = "quantite_lot_insuffisante"

    def __init__(self, lot_id, demande_kg, restant_kg):
        self.lot_id = lot_id
        self.demande_kg = Decimal(demande_kg)
        self.restant_kg = Decimal(restant_kg)
        self.manque_kg = self.demande_kg - self.restant_kg
        super().__init__(
            f"Lot {lot_id} : {self.demande_kg} kg demandés, "
            f"{self.restant_kg} kg restants.",
            lot_id=lot_id,
            demande_kg=self.demande_kg,
            restant_kg=self.restant_kg,
            manque_kg=self.manque_kg,
        )


class StockInsuffisant(ErreurStock):
    default_detail = "Stock insuffisant."
    default_code = "stock_insuffisant"

    def __init__(self, article_id, depot_id, demande_kg, disponible_kg):
        self.article_id = article_id
        self.depot_id = depot_id
        self.demande_kg = Decimal(demande_kg)
        self.disponible_kg = Decimal(disponible_kg)
        self.manque_kg = self.demande_kg - self.disponible_kg
        super().__init__(
            f"Stock insuffisant (article {article_id}, dépôt {depot_id}). "
            f"Disponible: {self.disponible_kg} | Demandé: {self.demande_kg}",
            article_id=article_id,
            depot_id=depot_id,
            demande_kg=self.demande_kg,
            disponible_kg=self.disponible_kg,
            manque_kg=self.manque_kg,
        )


class LotIncompatible(ErreurStock):
    default_detail = "Le lot n'appartient pas à ce dépôt / article."
    default_code = "lot_incompatible"

    def __init__(self, lot_id, article_id, depot_id):
        self.lot_id = lot_id
        self.article_id = article_id
        self.depot_id = depot_id
        super().__init__(
            f"Le lot {lot_id} n'appartient pas à l'article {article_id} "
            f"du dépôt {depot_id}.",
            lot_id=lot_id,
            article_id=article_id,
            depot_id=depot_id,
        )


class ErreurConservationQuantite(ErreurStock):
    default_detail = "La somme des lots sélectionnés ne correspond pas à la quantité demandée."
    default_code = "conservation_quantite"

    def __init__(self, demande_kg, alloue_kg):
        self.demande_kg = Decimal(demande_kg)
        self.alloue_kg = Decimal(alloue_kg)
        self.ecart_kg = self.alloue_kg - self.demande_kg
        super().__init__(
            f"Lots sélectionnés : {self.alloue_kg} kg pour "
            f"{self.demande_kg} kg demandés.",
            demande_kg=self.demande_kg,
            alloue_kg=self.alloue_kg,
            ecart_kg=self.ecart_kg,
        )


class SelectionLotManquante(ErreurStock):
    default_detail = "Sélection de lots obligatoire pour une diminution de stock."
    default_code = "selection_lot_manquante"

    def __init__(self, article_id, depot_id):
        self.article_id = article_id
        self.depot_id = depot_id
        super().__init__(
            article_id=article_id,
            depot_id=depot_id,
        )


class TauxChangeIndisponible(ErreurStock):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Taux de change indisponible."
    default_code = "taux_change_indisponible"

    def __init__(self, message=None, devise=None):
        self.devise = devise
        super().__init__(message, devise=devise)


class ModificationConcurrente(ErreurStock):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Position modifiée par un autre mouvement, veuillez réessayer."
    default_code = "modification_concurrente"

    def __init__(self, depot_id, article_id, message=None):
        self.depot_id = depot_id
        self.article_id = article_id
        super().__init__(message, depot_id=depot_id, article_id=article_id)


class VerrouIndisponible(ErreurStock):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "Position verrouillée par un autre mouvement, veuillez réessayer."
    default_code = "verrou_indisponible"

    def __init__(self, depot_id, article_id):
        self.depot_id = depot_id
        self.article_id = article_id
        super().__init__(depot_id=depot_id, article_id=article_id)
