# stocks/services/taux_change.py
"""
Taux de change (base USD).

FournisseurTauxChange interroge le flux JSON externe ; CacheTauxChange
conserve la table du jour dans un backend de cache Django jusqu'à minuit
(au plus un appel fournisseur par jour calendaire), garde la dernière
table valide et se rabat sur la table statique configurée. Une table de
repli n'est conservée que TTL_REPLI secondes.
Les mouvements ne sont jamais bloqués par une panne du fournisseur.
"""

import json
import logging
import ssl
from datetime import date, datetime, time, timedelta
from decimal import Decimal, InvalidOperation
from urllib.error import URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

import certifi
from django.conf import settings
from django.core.cache import caches
from django.utils import timezone

from stocks.exceptions import TauxChangeIndisponible

logger = logging.getLogger(__name__)

SOURCE_FOURNISSEUR = "fournisseur"
SOURCE_DERNIER = "dernier_connu"
SOURCE_SECOURS = "secours"


class FournisseurTauxChange:

    def __init__(self, url, access_key="", base="USD", devises=("EUR", "MRU"), timeout=10):
        self.url = url
        self.access_key = access_key
        self.base = base
        self.devises = tuple(devises)
        self.timeout = timeout

    @classmethod
    def depuis_settings(cls):
        config = settings.TAUX_CHANGE
        return cls(
            url=config.get("URL", ""),
            access_key=config.get("ACCESS_KEY", ""),
            base=config.get("BASE", "USD"),
            devises=config.get("DEVISES", ("EUR", "MRU")),
            timeout=config.get("TIMEOUT", 10),
        )

    def _url(self):
        params = {
            "currencies": ",".join(self.devises),
            "source": self.base,
        }
        if self.access_key:
            params["access_key"] = self.access_key
        return f"{self.url}?{urlencode(params)}"

    def get_taux(self, jour: date = None) -> dict[str, Decimal]:
        if not self.url:
            raise TauxChangeIndisponible("Aucun fournisseur de taux configuré.")

        ctx = ssl.create_default_context(cafile=certifi.where())
        req = Request(self._url(), headers={"User-Agent": "gestion-stock/1.0"})

        try:
            with urlopen(req, timeout=self.timeout, context=ctx) as resp:
                data = json.loads(resp.read().decode("utf-8"))
        except (URLError, OSError, ValueError) as exc:
            raise TauxChangeIndisponible(f"Fournisseur de taux injoignable : {exc}") from exc

        return self.lire_reponse(data)

    def lire_reponse(self, data) -> dict[str, Decimal]:
        """
        Format attendu : {"success": true, "quotes": {"USDEUR": 0.85, ...}}
        """
        if not isinstance(data, dict) or data.get("success") is False:
            raise TauxChangeIndisponible("Réponse du fournisseur de taux en échec.")

        quotes = data.get("quotes") or {}
        taux = {self.base: Decimal("1")}

        for devise in self.devises:
            valeur = quotes.get(f"{self.base}{devise}")
            try:
                valeur = Decimal(str(valeur))
            except (InvalidOperation, ValueError):
                valeur = None

            if valeur is None or not valeur.is_finite() or valeur <= 0:
                raise TauxChangeIndisponible(
                    f"Taux {self.base}/{devise} absent de la réponse.",
                    devise=devise,
                )
            taux[devise] = valeur

        return taux


class CacheTauxChange:

    def __init__(self, fournisseur, cache, secours, prefixe="taux_change", ttl_repli=300):
        self.fournisseur = fournisseur
        self.cache = cache
        self.secours = {k: Decimal(str(v)) for k, v in secours.items()}
        self.prefixe = prefixe
        self.ttl_repli = int(ttl_repli)

    @classmethod
    def depuis_settings(cls, fournisseur=None):
        config = settings.TAUX_CHANGE
        return cls(
            fournisseur=fournisseur or FournisseurTauxChange.depuis_settings(),
            cache=caches[config.get("CACHE_ALIAS", "default")],
            secours=config.get("SECOURS", {"USD": "1"}),
            ttl_repli=config.get("TTL_REPLI", 300),
        )

    # ============================================================
    # CLÉS / DURÉE
    # ============================================================

    def _cle(self, jour):
        return f"{self.prefixe}:{jour.isoformat()}"

    @property
    def _cle_dernier(self):
        return f"{self.prefixe}:dernier"

    def _secondes_jusqua_minuit(self):
        maintenant = timezone.localtime()
        minuit = timezone.make_aware(
            datetime.combine(maintenant.date() + timedelta(days=1), time.min),
            maintenant.tzinfo,
        )
        return max(1, int((minuit - maintenant).total_seconds()))

    # ============================================================
    # CHARGEMENT
    # ============================================================

    def _charger(self, jour):
        try:
            taux = self.fournisseur.get_taux(jour)
        except TauxChangeIndisponible as exc:
            dernier = self.cache.get(self._cle_dernier)
            if dernier is not None:
                entree = {
                    "jour": jour,
                    "taux": {**self.secours, **dernier["taux"]},
                    "source": SOURCE_DERNIER,
                }
            else:
                entree = {
                    "jour": jour,
                    "taux": dict(self.secours),
                    "source": SOURCE_SECOURS,
                }

            logger.warning(
                "Taux de change indisponibles (%s), repli sur %s",
                exc.message, entree["source"],
            )
        else:
            entree = {
                "jour": jour,
                "taux": {**self.secours, **taux},
                "source": SOURCE_FOURNISSEUR,
            }
            self.cache.set(self._cle_dernier, entree, None)
            logger.info("Taux de change du %s chargés : %s", jour, taux)

        duree = self._secondes_jusqua_minuit()
        if entree["source"] != SOURCE_FOURNISSEUR:
            # Repli : le fournisseur est réinterrogé après ttl_repli secondes
            duree = min(duree, self.ttl_repli)

        self.cache.set(self._cle(jour), entree, duree)
        return entree

    def consulter(self, jour=None):
        """Table du jour avec sa provenance (fournisseur, dernier connu, secours)."""
        jour = jour or timezone.localdate()
        entree = self.cache.get(self._cle(jour))
        if entree is None:
            entree = self._charger(jour)
        return entree

    def get_taux(self, jour=None) -> dict[str, Decimal]:
        return self.consulter(jour)["taux"]

    def rafraichir(self, jour=None):
        jour = jour or timezone.localdate()
        self.cache.delete(self._cle(jour))
        return self._charger(jour)

    # ============================================================
    # CONVERSION
    # ============================================================

    def facteur(self, devise_source, devise_cible, jour=None, taux=None) -> Decimal:
        if devise_source == devise_cible:
            return Decimal("1")

        taux = taux if taux is not None else self.get_taux(jour)
        return facteur_conversion(taux, devise_source, devise_cible)

    def convertir(self, montant, devise_source, devise_cible, jour=None, taux=None) -> Decimal:
        return Decimal(montant) * self.facteur(devise_source, devise_cible, jour=jour, taux=taux)


def facteur_conversion(taux, devise_source, devise_cible) -> Decimal:
    """
    Taux exprimés contre la base : montant_cible = montant × taux[cible] / taux[source].
    """
    if devise_source == devise_cible:
        return Decimal("1")

    for devise in (devise_source, devise_cible):
        if devise not in taux:
            raise TauxChangeIndisponible(
                f"Aucun taux connu pour {devise}.", devise=devise
            )

    return taux[devise_cible] / taux[devise_source]
