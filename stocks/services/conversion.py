# stocks/services/conversion.py
"""
Conversions kg / cartons / tonnes.

Le kg reste l'unité stockée ; les cartons ne servent qu'à l'affichage
et à la saisie. Facteur de conditionnement par défaut : 20 kg / carton.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from referentiel.constants import KG_PAR_CARTON_DEFAUT
from stocks.constants import KG_PAR_TONNE, QUANTITE_QUANTUM
from stocks.exceptions import ErreurValidation


def en_decimal(valeur, champ=None):
    if isinstance(valeur, bool):
        raise ErreurValidation(f"Valeur numérique invalide : {valeur!r}.", champ=champ)
    try:
        resultat = valeur if isinstance(valeur, Decimal) else Decimal(str(valeur))
    except (InvalidOperation, ValueError, TypeError):
        raise ErreurValidation(f"Valeur numérique invalide : {valeur!r}.", champ=champ)

    if not resultat.is_finite():
        raise ErreurValidation(f"Valeur numérique invalide : {valeur!r}.", champ=champ)
    return resultat


def _facteur(kg_par_carton):
    if kg_par_carton is None:
        return KG_PAR_CARTON_DEFAUT

    facteur = en_decimal(kg_par_carton, "kg_par_carton")
    if facteur <= 0:
        raise ErreurValidation(
            "Le nombre de kg par carton doit être strictement positif.",
            champ="kg_par_carton",
        )
    return facteur


def cartons_depuis_kg(quantite_kg, kg_par_carton=None):
    return en_decimal(quantite_kg, "quantite_kg") / _facteur(kg_par_carton)


def kg_depuis_cartons(cartons, kg_par_carton=None):
    return en_decimal(cartons, "cartons") * _facteur(kg_par_carton)


def tonnes_depuis_kg(quantite_kg):
    return en_decimal(quantite_kg, "quantite_kg") / KG_PAR_TONNE


def cout_par_tonne(cout_par_kg):
    return en_decimal(cout_par_kg, "cout_unitaire") * KG_PAR_TONNE


def en_quantite_kg(valeur, champ="quantite_kg"):
    """
    Quantité en kg arrondie au gramme, précision des colonnes quantité.
    Lots et positions reçoivent ainsi exactement la même valeur.
    """
    return en_decimal(valeur, champ).quantize(QUANTITE_QUANTUM, rounding=ROUND_HALF_UP)
