from stocks.models_stock import (  # noqa: F401
    Lot,
    PositionStock,
    MouvementStock,
    LigneMouvementStock,
    AlerteStock,
)
