# stocks/services/cout_revient.py
"""
Calculateur de coût de revient (par tonne).

    frais / t   = Σ frais conteneur / tonnes par conteneur
                  + fret par tonne
                  + taux de retenue % × prix SMCP
    coût / t    = frais / t convertis dans la devise cible + CUMP / t

Les frais sont saisis dans la devise des frais (MRU par défaut), le
prix SMCP est d'abord ramené dans cette devise. Fonction pure.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from django.conf import settings

from stocks.constants import MONTANT_QUANTUM
from stocks.exceptions import ErreurValidation
from stocks.services.conversion import en_decimal
from stocks.services.taux_change import facteur_conversion


@dataclass(frozen=True)
class ParametresCoutRevient:
    frais_conteneur: dict = field(default_factory=dict)
    tonnes_par_conteneur: Decimal = Decimal("28")
    fret_par_tonne: Decimal = Decimal("0")
    taux_retenue_pct: Decimal = Decimal("12")
    devise_frais: str = "MRU"

    @classmethod
    def depuis_settings(cls, **surcharges):
        config = settings.COUT_REVIENT_DEFAUTS

        frais = {
            nom: en_decimal(montant, nom)
            for nom, montant in config.get("FRAIS_CONTENEUR", {}).items()
        }
        frais.update({
            nom: en_decimal(montant, nom)
            for nom, montant in (surcharges.pop("frais_conteneur", None) or {}).items()
        })

        valeurs = {
            "tonnes_par_conteneur": config.get("TONNES_PAR_CONTENEUR", "28"),
            "fret_par_tonne": config.get("FRET_PAR_TONNE", "0"),
            "taux_retenue_pct": config.get("TAUX_RETENUE_PCT", "12"),
        }
        valeurs.update({k: v for k, v in surcharges.items() if v is not None and k in valeurs})

        return cls(
            frais_conteneur=frais,
            tonnes_par_conteneur=en_decimal(valeurs["tonnes_par_conteneur"], "tonnes_par_conteneur"),
            fret_par_tonne=en_decimal(valeurs["fret_par_tonne"], "fret_par_tonne"),
            taux_retenue_pct=en_decimal(valeurs["taux_retenue_pct"], "taux_retenue_pct"),
            devise_frais=config.get("DEVISE_FRAIS", "MRU"),
        )

    @property
    def total_frais_conteneur(self):
        return sum(self.frais_conteneur.values(), Decimal("0"))


@dataclass(frozen=True)
class CoutRevient:
    devise: str
    frais_conteneur_par_tonne: Decimal
    fret_par_tonne: Decimal
    retenue_par_tonne: Decimal
    frais_par_tonne_devise_frais: Decimal
    frais_par_tonne: Decimal
    cump_par_tonne: Decimal
    cout_revient_par_tonne: Decimal


def calculer_cout_revient(prix_smcp, devise_smcp, cump_par_tonne, devise, taux, parametres):
    """
    prix_smcp : prix de référence de l'article (par tonne), dans devise_smcp.
    cump_par_tonne : CUMP de la position déjà exprimé dans `devise`.
    """
    if parametres.tonnes_par_conteneur <= 0:
        raise ErreurValidation(
            "Le nombre de tonnes par conteneur doit être strictement positif.",
            champ="tonnes_par_conteneur",
        )

    smcp = en_decimal(prix_smcp, "prix_smcp") * facteur_conversion(
        taux, devise_smcp, parametres.devise_frais
    )

    frais_conteneur = parametres.total_frais_conteneur / parametres.tonnes_par_conteneur
    retenue = parametres.taux_retenue_pct * smcp / Decimal("100")
    frais_devise_frais = frais_conteneur + parametres.fret_par_tonne + retenue

    frais = frais_devise_frais * facteur_conversion(taux, parametres.devise_frais, devise)
    cump_par_tonne = en_decimal(cump_par_tonne, "cump_par_tonne")

    return CoutRevient(
        devise=devise,
        frais_conteneur_par_tonne=frais_conteneur.quantize(MONTANT_QUANTUM),
        fret_par_tonne=parametres.fret_par_tonne.quantize(MONTANT_QUANTUM),
        retenue_par_tonne=retenue.quantize(MONTANT_QUANTUM),
        frais_par_tonne_devise_frais=frais_devise_frais.quantize(MONTANT_QUANTUM),
        frais_par_tonne=frais.quantize(MONTANT_QUANTUM),
        cump_par_tonne=cump_par_tonne.quantize(MONTANT_QUANTUM),
        cout_revient_par_tonne=(frais + cump_par_tonne).quantize(MONTANT_QUANTUM),
    )
