from decimal import Decimal

import pytest

from stocks.exceptions import ErreurValidation
from stocks.services.conversion import (
    cartons_depuis_kg,
    cout_par_tonne,
    en_decimal,
    kg_depuis_cartons,
    tonnes_depuis_kg,
)


def test_cartons_conditionnement_standard():
    assert cartons_depuis_kg(Decimal("1000"), Decimal("20")) == Decimal("50")


def test_cartons_facteur_par_defaut():
    assert cartons_depuis_kg("1000") == Decimal("50")


def test_kg_depuis_cartons():
    assert kg_depuis_cartons(Decimal("12.5"), Decimal("10")) == Decimal("125")


def test_tonnes_et_cout_par_tonne():
    assert tonnes_depuis_kg(Decimal("1500")) == Decimal("1.5")
    assert cout_par_tonne(Decimal("12.5")) == Decimal("12500")


@pytest.mark.parametrize("facteur", [0, Decimal("-5")])
def test_facteur_non_positif(facteur):
    with pytest.raises(ErreurValidation):
        cartons_depuis_kg(Decimal("100"), facteur)


@pytest.mark.parametrize("valeur", ["abc", None, True, "NaN", "Infinity"])
def test_en_decimal_invalide(valeur):
    with pytest.raises(ErreurValidation):
        en_decimal(valeur, "quantite_kg")


def test_aller_retour_kg_cartons():
    kg = Decimal("1234.567")

    retour = kg_depuis_cartons(cartons_depuis_kg(kg, Decimal("3")), Decimal("3"))

    assert abs(retour - kg) < Decimal("0.000001")
