from django.urls import path, include
from rest_framework.routers import DefaultRouter

from .views_stock.alerte import AlerteStockViewSet
from .views_stock.lot import LotViewSet
from .views_stock.mouvement import MouvementStockViewSet
from .views_stock.position import PositionStockViewSet
from .views_stock.valorisation import (
    CoutRevientView,
    RafraichirTauxChangeView,
    TauxChangeView,
    ValorisationView,
)

router = DefaultRouter()
router.register("mouvements", MouvementStockViewSet, basename="mouvements")
router.register("positions", PositionStockViewSet, basename="positions")
router.register("lots", LotViewSet, basename="lots")
router.register("alertes", AlerteStockViewSet, basename="alertes")

urlpatterns = [
    path("", include(router.urls)),
    path("valorisation/", ValorisationView.as_view(), name="valorisation"),
    path("cout-revient/", CoutRevientView.as_view(), name="cout-revient"),
    path("taux-change/", TauxChangeView.as_view(), name="taux-change"),
    path("taux-change/rafraichir/", RafraichirTauxChangeView.as_view(), name="taux-change-rafraichir"),
]
