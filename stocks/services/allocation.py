# stocks/services/allocation.py
"""
Stratégies d'allocation des lots pour les diminutions de stock.

- AllocationFIFO : consomme les lots du plus ancien au plus récent.
- AllocationManuelle : l'opérateur désigne les lots et les quantités.

Les deux retournent une liste d'Allocation calculée sans verrou ;
le moteur revérifie chaque restant une fois la position verrouillée.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings

from stocks.constants import TOLERANCE_CONSERVATION_KG
from stocks.exceptions import (
    ErreurConservationQuantite,
    ErreurValidation,
    LotIncompatible,
    QuantiteLotInsuffisante,
    StockInsuffisant,
)
from stocks.services.conversion import en_quantite_kg


@dataclass(frozen=True)
class SelectionLot:
    lot_id: int
    quantite_kg: Decimal


@dataclass(frozen=True)
class Allocation:
    lot: object
    quantite_kg: Decimal
    # Restant lu au moment de la planification
    restant_kg: Decimal

    @property
    def lot_id(self):
        return self.lot.pk


def total_alloue(allocations):
    return sum((a.quantite_kg for a in allocations), Decimal("0"))


class StrategieAllocation(ABC):

    @abstractmethod
    def allouer(self, registre, article_id, depot_id, quantite_kg):
        """Retourne la liste des Allocation couvrant `quantite_kg`."""


class AllocationFIFO(StrategieAllocation):

    def allouer(self, registre, article_id, depot_id, quantite_kg):
        quantite_kg = en_quantite_kg(quantite_kg)
        reste = quantite_kg
        allocations = []

        for lot in registre.lots_disponibles(article_id, depot_id):
            if reste <= 0:
                break

            pris = min(lot.quantite_restante_kg, reste)
            allocations.append(
                Allocation(lot=lot, quantite_kg=pris, restant_kg=lot.quantite_restante_kg)
            )
            reste -= pris

        if reste > 0:
            raise StockInsuffisant(
                article_id, depot_id, quantite_kg, quantite_kg - reste
            )

        return allocations

    def __repr__(self):
        return "AllocationFIFO()"


class AllocationManuelle(StrategieAllocation):

    def __init__(self, selections, tolerance=None):
        if tolerance is None:
            tolerance = getattr(settings, "STOCK_MOTEUR", {}).get(
                "TOLERANCE_CONSERVATION_KG", TOLERANCE_CONSERVATION_KG
            )
        self.tolerance = Decimal(str(tolerance))
        self.selections = self._fusionner(selections)

    @staticmethod
    def _fusionner(selections):
        """
        Accepte des SelectionLot ou des dicts {lot_id, quantite_kg} ;
        un même lot cité plusieurs fois est cumulé.
        """
        cumul = {}
        for selection in selections or []:
            if isinstance(selection, dict):
                lot_id = selection.get("lot_id")
                quantite = selection.get("quantite_kg")
            else:
                lot_id = selection.lot_id
                quantite = selection.quantite_kg

            if lot_id is None:
                raise ErreurValidation("Lot non renseigné dans la sélection.", champ="lot_id")

            quantite = en_quantite_kg(quantite)
            if quantite <= 0:
                raise ErreurValidation(
                    f"Quantité sélectionnée invalide pour le lot {lot_id}.",
                    champ="quantite_kg",
                )

            cumul[lot_id] = cumul.get(lot_id, Decimal("0")) + quantite

        return [SelectionLot(lot_id=k, quantite_kg=v) for k, v in cumul.items()]

    def allouer(self, registre, article_id, depot_id, quantite_kg):
        quantite_kg = en_quantite_kg(quantite_kg)
        lots = registre.get_lots(s.lot_id for s in self.selections)
        allocations = []

        for selection in self.selections:
            lot = lots.get(selection.lot_id)

            if (
                lot is None
                or lot.article_id != article_id
                or lot.depot_id != depot_id
            ):
                raise LotIncompatible(selection.lot_id, article_id, depot_id)

            if selection.quantite_kg > lot.quantite_restante_kg:
                raise QuantiteLotInsuffisante(
                    lot.pk, selection.quantite_kg, lot.quantite_restante_kg
                )

            allocations.append(
                Allocation(
                    lot=lot,
                    quantite_kg=selection.quantite_kg,
                    restant_kg=lot.quantite_restante_kg,
                )
            )

        alloue = total_alloue(allocations)
        if abs(alloue - quantite_kg) > self.tolerance:
            raise ErreurConservationQuantite(quantite_kg, alloue)

        return allocations

    def __repr__(self):
        return f"AllocationManuelle({self.selections!r})"
