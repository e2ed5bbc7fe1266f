from datetime import date
from decimal import Decimal
from unittest import mock
from urllib.error import URLError

import pytest
from django.core.cache import caches

from stocks.exceptions import TauxChangeIndisponible
from stocks.services.taux_change import (
    CacheTauxChange,
    FournisseurTauxChange,
    facteur_conversion,
)

SECOURS = {"USD": "1", "EUR": "0.85", "MRU": "41.5"}
JOUR = date(2024, 1, 15)


def _fournisseur():
    return FournisseurTauxChange(url="https://taux.example/live", devises=("EUR", "MRU"))


def _cache(fournisseur):
    return CacheTauxChange(fournisseur, caches["default"], SECOURS, prefixe="test_taux")


def test_lire_reponse():
    taux = _fournisseur().lire_reponse(
        {"success": True, "quotes": {"USDEUR": 0.92, "USDMRU": 39.8}}
    )

    assert taux == {"USD": Decimal("1"), "EUR": Decimal("0.92"), "MRU": Decimal("39.8")}


@pytest.mark.parametrize(
    "data",
    [
        {"success": False, "error": {"code": 101}},
        {"success": True, "quotes": {"USDEUR": 0.92}},
        {"success": True, "quotes": {"USDEUR": 0.92, "USDMRU": 0}},
        {"success": True, "quotes": {"USDEUR": "abc", "USDMRU": 39.8}},
        ["pas", "un", "objet"],
    ],
)
def test_lire_reponse_invalide(data):
    with pytest.raises(TauxChangeIndisponible):
        _fournisseur().lire_reponse(data)


def test_get_taux_sans_url():
    with pytest.raises(TauxChangeIndisponible):
        FournisseurTauxChange(url="").get_taux(JOUR)


@mock.patch("stocks.services.taux_change.urlopen")
def test_get_taux_http(urlopen):
    urlopen.return_value.__enter__.return_value.read.return_value = (
        b'{"success": true, "quotes": {"USDEUR": 0.9, "USDMRU": 40}}'
    )

    taux = _fournisseur().get_taux(JOUR)

    assert taux["MRU"] == Decimal("40")
    requete = urlopen.call_args[0][0]
    assert "currencies=EUR%2CMRU" in requete.full_url
    assert "source=USD" in requete.full_url


@mock.patch("stocks.services.taux_change.urlopen", side_effect=URLError("timeout"))
def test_get_taux_fournisseur_injoignable(urlopen):
    with pytest.raises(TauxChangeIndisponible):
        _fournisseur().get_taux(JOUR)


def test_un_seul_appel_par_jour():
    fournisseur = mock.Mock()
    fournisseur.get_taux.return_value = {"USD": Decimal("1"), "EUR": Decimal("0.9"), "MRU": Decimal("40")}
    cache = _cache(fournisseur)

    premier = cache.consulter(JOUR)
    second = cache.consulter(JOUR)

    assert fournisseur.get_taux.call_count == 1
    assert premier["source"] == "fournisseur"
    assert second["taux"]["EUR"] == Decimal("0.9")


def test_repli_sur_la_table_de_secours():
    fournisseur = mock.Mock()
    fournisseur.get_taux.side_effect = TauxChangeIndisponible("panne")

    entree = _cache(fournisseur).consulter(JOUR)

    assert entree["source"] == "secours"
    assert entree["taux"]["MRU"] == Decimal("41.5")


def test_repli_sur_le_dernier_taux_connu():
    fournisseur = mock.Mock()
    fournisseur.get_taux.return_value = {"USD": Decimal("1"), "EUR": Decimal("0.9"), "MRU": Decimal("40")}
    cache = _cache(fournisseur)
    cache.consulter(JOUR)

    fournisseur.get_taux.side_effect = TauxChangeIndisponible("panne")
    entree = cache.rafraichir(JOUR)

    assert fournisseur.get_taux.call_count == 2
    assert entree["source"] == "dernier_connu"
    assert entree["taux"]["MRU"] == Decimal("40")


def test_table_partielle_completee_par_le_secours():
    fournisseur = mock.Mock()
    fournisseur.get_taux.return_value = {"USD": Decimal("1"), "EUR": Decimal("0.9")}

    taux = _cache(fournisseur).get_taux(JOUR)

    assert taux["EUR"] == Decimal("0.9")
    assert taux["MRU"] == Decimal("41.5")


def test_conversion():
    cache = _cache(mock.Mock())
    taux = {"USD": Decimal("1"), "EUR": Decimal("0.85"), "MRU": Decimal("41.5")}

    assert cache.convertir(Decimal("100"), "USD", "MRU", taux=taux) == Decimal("4150")
    assert cache.facteur("MRU", "MRU") == Decimal("1")
    assert facteur_conversion(taux, "EUR", "USD") == Decimal("1") / Decimal("0.85")


def test_devise_sans_taux():
    with pytest.raises(TauxChangeIndisponible) as exc:
        facteur_conversion({"USD": Decimal("1")}, "USD", "XOF")

    assert exc.value.devise == "XOF"


@mock.patch.object(CacheTauxChange, "_secondes_jusqua_minuit", return_value=3600)
def test_table_de_repli_conservee_peu_de_temps(minuit):
    fournisseur = mock.Mock()
    fournisseur.get_taux.side_effect = TauxChangeIndisponible("panne")
    backend = mock.Mock()
    backend.get.return_value = None

    CacheTauxChange(fournisseur, backend, SECOURS, ttl_repli=60).consulter(JOUR)

    backend.set.assert_called_once_with("taux_change:2024-01-15", mock.ANY, 60)


@mock.patch.object(CacheTauxChange, "_secondes_jusqua_minuit", return_value=3600)
def test_table_du_fournisseur_conservee_jusqua_minuit(minuit):
    fournisseur = mock.Mock()
    fournisseur.get_taux.return_value = {"USD": Decimal("1"), "EUR": Decimal("0.9"), "MRU": Decimal("40")}
    backend = mock.Mock()
    backend.get.return_value = None

    CacheTauxChange(fournisseur, backend, SECOURS, ttl_repli=60).consulter(JOUR)

    backend.set.assert_any_call("taux_change:2024-01-15", mock.ANY, 3600)
    backend.set.assert_any_call("taux_change:dernier", mock.ANY, None)
