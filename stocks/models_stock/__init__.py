from stocks.models_stock.lot import Lot
from stocks.models_stock.position import PositionStock
from stocks.models_stock.mouvement import MouvementStock, LigneMouvementStock
from stocks.models_stock.alerte import AlerteStock

__all__ = [
    "Lot",
    "PositionStock",
    "MouvementStock",
    "LigneMouvementStock",
    "AlerteStock",
]
