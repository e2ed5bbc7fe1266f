# stocks/services/commandes.py
"""
Commandes de mouvement (en mémoire, avant application).

Une variante par type de mouvement, chacune ne portant que les champs
utiles à son type. Toute incohérence est rejetée à la construction
(ErreurValidation). Cycle de vie :

    BROUILLON -> VALIDE -> APPLIQUE
    BROUILLON / VALIDE -> REJETE
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from referentiel.constants import Devise
from stocks.constants import ALLOWED_TRANSITIONS, StatutMouvement, TypeMouvement
from stocks.exceptions import ErreurValidation
from stocks.services.allocation import StrategieAllocation
from stocks.services.conversion import en_decimal, en_quantite_kg


def _verifier_devise(devise):
    if devise is not None and devise not in Devise.values:
        raise ErreurValidation(f"Devise inconnue : {devise}.", champ="devise")


def _verifier_strategie(allocation):
    if allocation is not None and not isinstance(allocation, StrategieAllocation):
        raise ErreurValidation("Stratégie d'allocation invalide.", champ="allocation")


# ============================================================
# LIGNES
# ============================================================

@dataclass(frozen=True)
class LigneEntree:
    article_id: int
    quantite_kg: Decimal
    cout_unitaire: Decimal
    devise: Optional[str] = None
    numero_lot: str = ""
    quarantaine: bool = False

    def __post_init__(self):
        quantite = en_quantite_kg(self.quantite_kg)
        cout = en_decimal(self.cout_unitaire, "cout_unitaire")

        if quantite <= 0:
            raise ErreurValidation(
                "La quantité entrée doit être strictement positive (au gramme près).",
                champ="quantite_kg",
            )
        if cout < 0:
            raise ErreurValidation(
                "Le coût unitaire ne peut pas être négatif.",
                champ="cout_unitaire",
            )
        _verifier_devise(self.devise)

        object.__setattr__(self, "quantite_kg", quantite)
        object.__setattr__(self, "cout_unitaire", cout)


@dataclass(frozen=True)
class LigneSortie:
    article_id: int
    quantite_kg: Decimal
    allocation: Optional[StrategieAllocation] = None

    def __post_init__(self):
        quantite = en_quantite_kg(self.quantite_kg)
        if quantite <= 0:
            raise ErreurValidation(
                "La quantité doit être strictement positive (au gramme près).",
                champ="quantite_kg",
            )
        _verifier_strategie(self.allocation)

        object.__setattr__(self, "quantite_kg", quantite)


# ============================================================
# MOUVEMENTS
# ============================================================

@dataclass(kw_only=True)
class Mouvement(ABC):
    type_mouvement: ClassVar[str]

    reference: str = ""
    motif: str = ""
    date_mouvement: Optional[datetime] = None

    statut: str = field(default=StatutMouvement.BROUILLON, init=False)
    erreur: Optional[Exception] = field(default=None, init=False, repr=False)

    def changer_statut(self, nouveau_statut):
        if nouveau_statut not in ALLOWED_TRANSITIONS.get(self.statut, []):
            raise ErreurValidation(
                f"Transition interdite : {self.statut} → {nouveau_statut}",
                champ="statut",
            )
        self.statut = nouveau_statut

    def valider(self):
        self.changer_statut(StatutMouvement.VALIDE)

    def marquer_applique(self):
        self.changer_statut(StatutMouvement.APPLIQUE)

    def rejeter(self, erreur=None):
        self.changer_statut(StatutMouvement.REJETE)
        self.erreur = erreur

    @abstractmethod
    def cles(self):
        """Couples (depot_id, article_id) touchés par le mouvement."""


def _lignes_non_vides(lignes, type_ligne):
    lignes = tuple(lignes or ())
    if not lignes:
        raise ErreurValidation("Le mouvement doit comporter au moins une ligne.", champ="lignes")
    for ligne in lignes:
        if not isinstance(ligne, type_ligne):
            raise ErreurValidation("Ligne de mouvement invalide.", champ="lignes")
    return lignes


@dataclass(kw_only=True)
class Entree(Mouvement):
    type_mouvement: ClassVar[str] = TypeMouvement.ENTREE

    depot_id: int
    lignes: tuple

    def __post_init__(self):
        self.lignes = _lignes_non_vides(self.lignes, LigneEntree)

    def cles(self):
        return {(self.depot_id, ligne.article_id) for ligne in self.lignes}


@dataclass(kw_only=True)
class Transfert(Mouvement):
    type_mouvement: ClassVar[str] = TypeMouvement.TRANSFERT

    depot_source_id: int
    depot_destination_id: int
    lignes: tuple

    def __post_init__(self):
        if self.depot_source_id == self.depot_destination_id:
            raise ErreurValidation(
                "Le dépôt de destination doit être différent du dépôt source.",
                champ="depot_destination",
            )
        self.lignes = _lignes_non_vides(self.lignes, LigneSortie)

        articles = [ligne.article_id for ligne in self.lignes]
        if len(articles) != len(set(articles)):
            raise ErreurValidation(
                "Un article ne peut figurer qu'une fois par transfert.",
                champ="lignes",
            )

    def cles(self):
        cles = set()
        for ligne in self.lignes:
            cles.add((self.depot_source_id, ligne.article_id))
            cles.add((self.depot_destination_id, ligne.article_id))
        return cles


@dataclass(kw_only=True)
class Sortie(Mouvement):
    type_mouvement: ClassVar[str] = TypeMouvement.SORTIE

    depot_id: int
    lignes: tuple

    def __post_init__(self):
        self.lignes = _lignes_non_vides(self.lignes, LigneSortie)

        articles = [ligne.article_id for ligne in self.lignes]
        if len(articles) != len(set(articles)):
            raise ErreurValidation(
                "Un article ne peut figurer qu'une fois par sortie.",
                champ="lignes",
            )

    def cles(self):
        return {(self.depot_id, ligne.article_id) for ligne in self.lignes}


@dataclass(kw_only=True)
class Ajustement(Mouvement):
    """
    Ajustement signé d'une position.
    Négatif : sélection manuelle des lots obligatoire.
    Positif : se comporte comme une entrée d'une ligne, coût requis.
    """
    type_mouvement: ClassVar[str] = TypeMouvement.AJUSTEMENT

    depot_id: int
    article_id: int
    delta_kg: Decimal
    allocation: Optional[StrategieAllocation] = None
    cout_unitaire: Optional[Decimal] = None
    devise: Optional[str] = None
    numero_lot: str = ""
    quarantaine: bool = False

    def __post_init__(self):
        self.delta_kg = en_quantite_kg(self.delta_kg, "delta_kg")

        if self.delta_kg == 0:
            raise ErreurValidation(
                "Un ajustement nul n'a pas d'effet.",
                champ="delta_kg",
            )

        if self.delta_kg > 0:
            if self.cout_unitaire is None:
                raise ErreurValidation(
                    "Le coût unitaire est obligatoire pour un ajustement positif.",
                    champ="cout_unitaire",
                )
            self.cout_unitaire = en_decimal(self.cout_unitaire, "cout_unitaire")
            if self.cout_unitaire < 0:
                raise ErreurValidation(
                    "Le coût unitaire ne peut pas être négatif.",
                    champ="cout_unitaire",
                )

        _verifier_devise(self.devise)
        _verifier_strategie(self.allocation)

    @property
    def est_positif(self):
        return self.delta_kg > 0

    def cles(self):
        return {(self.depot_id, self.article_id)}


@dataclass(kw_only=True)
class AjustementCommercialisable(Mouvement):
    """
    Passage en / hors quarantaine : seule la quantité
    commercialisable change.
    """
    type_mouvement: ClassVar[str] = TypeMouvement.AJUSTEMENT_COMMERCIALISABLE

    depot_id: int
    article_id: int
    delta_kg: Decimal

    def __post_init__(self):
        self.delta_kg = en_quantite_kg(self.delta_kg, "delta_kg")
        if self.delta_kg == 0:
            raise ErreurValidation(
                "Un ajustement nul n'a pas d'effet.",
                champ="delta_kg",
            )

    def cles(self):
        return {(self.depot_id, self.article_id)}
