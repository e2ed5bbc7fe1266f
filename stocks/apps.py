from django.apps import AppConfig


class StocksConfig(AppConfig):
    """
    Racine de composition du moteur de stock.

    Construit une seule fois les services partagés (cache des taux,
    catalogue, registre des lots, moteur, agrégateur) ; les vues et les
    commandes les récupèrent via apps.get_app_config("stocks").
    """

    default_auto_field = "django.db.models.BigAutoField"
    name = "stocks"
    verbose_name = "Stock"

    def ready(self):
        from django.core.cache import caches
        from django.conf import settings

        from referentiel.catalogue import CatalogueArticles, RegistreDepots
        from stocks.services.agregation import AgregateurStock
        from stocks.services.mouvements import MoteurMouvements
        from stocks.services.registre_lots import RegistreLots
        from stocks.services.taux_change import CacheTauxChange
        from stocks.services.valorisation import ServiceValorisation

        cache = caches[settings.TAUX_CHANGE.get("CACHE_ALIAS", "default")]

        self.taux = CacheTauxChange.depuis_settings()
        self.catalogue = CatalogueArticles(cache=cache, ttl=300)
        self.depots = RegistreDepots()
        self.registre = RegistreLots()
        self.valorisation = ServiceValorisation(self.taux)
        self.moteur = MoteurMouvements(
            registre=self.registre,
            catalogue=self.catalogue,
            depots=self.depots,
            taux=self.taux,
        )
        self.agregateur = AgregateurStock(self.valorisation, self.taux)
