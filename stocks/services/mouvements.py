# stocks/services/mouvements.py
"""
Moteur d'application des mouvements de stock.

Deux temps :

1. Planification sans verrou : existence des dépôts / articles, choix
   des lots (FIFO ou sélection manuelle), contrôle du commercialisable,
   relevé de la version de chaque position diminuée.
2. Application dans un seul transaction.atomic : verrouillage des
   positions dans l'ordre (depot_id, article_id), contrôle des versions
   relevées, puis mutation des lots, des positions (CUMP inclus) et
   écriture du journal.

Aucun état partiellement appliqué n'est observable.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from stocks.constants import Sens, StatutMouvement, TypeMouvement
from stocks.exceptions import (
    ErreurStock,
    ErreurValidation,
    ModificationConcurrente,
    SelectionLotManquante,
    StockInsuffisant,
)
from stocks.models_stock.lot import Lot
from stocks.models_stock.mouvement import LigneMouvementStock, MouvementStock
from stocks.models_stock.position import PositionStock
from stocks.services.allocation import AllocationFIFO, AllocationManuelle, total_alloue
from stocks.services.commandes import (
    Ajustement,
    AjustementCommercialisable,
    Entree,
    Sortie,
    Transfert,
)
from stocks.services.valorisation import (
    base_de_cout,
    entrer_en_position,
    sortir_de_position,
)
from stocks.services.verrous import verrouiller_positions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResultatMouvement:
    mouvement_id: int
    positions: list


@dataclass
class _Augmentation:
    depot_id: int
    article_id: int
    quantite_kg: Decimal
    cout_unitaire: Decimal
    devise: str
    numero_lot: str = ""
    quarantaine: bool = False
    lot_origine: object = None


@dataclass
class _Diminution:
    depot_id: int
    article_id: int
    allocations: list
    # Transfert / sortie : le commercialisable baisse du total alloué.
    # Ajustement : il est seulement ramené sous la nouvelle quantité.
    reduit_commercialisable: bool = True


@dataclass
class _Plan:
    diminutions: list = field(default_factory=list)
    augmentations: list = field(default_factory=list)
    versions: dict = field(default_factory=dict)
    delta_commercialisable: Decimal = None


def _exiger_selection(ligne_allocation, article_id, depot_id):
    if not isinstance(ligne_allocation, AllocationManuelle) or not ligne_allocation.selections:
        raise SelectionLotManquante(article_id, depot_id)
    return ligne_allocation


class MoteurMouvements:

    def __init__(self, registre, catalogue, depots, taux):
        self.registre = registre
        self.catalogue = catalogue
        self.depots = depots
        self.taux = taux

    # ============================================================
    # POINT D'ENTRÉE
    # ============================================================

    def appliquer(self, mouvement, utilisateur=None) -> ResultatMouvement:
        if mouvement.statut != StatutMouvement.BROUILLON:
            raise ErreurValidation(
                f"Seul un mouvement brouillon peut être appliqué ({mouvement.statut}).",
                champ="statut",
            )

        try:
            plan = self._planifier(mouvement)
            mouvement.valider()
            resultat = self._executer(mouvement, plan, utilisateur)
        except ErreurStock as exc:
            mouvement.rejeter(exc)
            logger.info(
                "Mouvement %s rejeté : %s",
                mouvement.type_mouvement, exc.message,
            )
            raise
        except Exception as exc:
            mouvement.rejeter(exc)
            logger.exception("Mouvement %s en échec", mouvement.type_mouvement)
            raise

        mouvement.marquer_applique()
        logger.info(
            "Mouvement %s #%s appliqué (%s position(s))",
            mouvement.type_mouvement, resultat.mouvement_id, len(resultat.positions),
        )
        return resultat

    def ajuster_position(
        self,
        depot_id,
        article_id,
        delta_kg,
        selection=None,
        cout_unitaire=None,
        devise=None,
        motif="",
        utilisateur=None,
    ) -> PositionStock:
        mouvement = Ajustement(
            depot_id=depot_id,
            article_id=article_id,
            delta_kg=delta_kg,
            allocation=AllocationManuelle(selection) if selection else None,
            cout_unitaire=cout_unitaire,
            devise=devise,
            motif=motif,
        )
        self.appliquer(mouvement, utilisateur=utilisateur)
        return PositionStock.objects.get(depot_id=depot_id, article_id=article_id)

    def ajuster_commercialisable(self, depot_id, article_id, delta_kg, motif="", utilisateur=None):
        mouvement = AjustementCommercialisable(
            depot_id=depot_id,
            article_id=article_id,
            delta_kg=delta_kg,
            motif=motif,
        )
        self.appliquer(mouvement, utilisateur=utilisateur)
        return PositionStock.objects.get(depot_id=depot_id, article_id=article_id)

    # ============================================================
    # PLANIFICATION (sans verrou)
    # ============================================================

    def _planifier(self, mouvement):
        if isinstance(mouvement, Entree):
            return self._planifier_entree(mouvement)
        if isinstance(mouvement, Transfert):
            return self._planifier_transfert(mouvement)
        if isinstance(mouvement, Sortie):
            return self._planifier_sortie(mouvement)
        if isinstance(mouvement, Ajustement):
            return self._planifier_ajustement(mouvement)
        if isinstance(mouvement, AjustementCommercialisable):
            return self._planifier_commercialisable(mouvement)

        raise ErreurValidation("Type de mouvement inconnu.", champ="type")

    def _augmentation(self, depot_id, article_id, quantite_kg, cout_unitaire, devise, **options):
        fiche = self.catalogue.get_article(article_id)
        return _Augmentation(
            depot_id=depot_id,
            article_id=article_id,
            quantite_kg=quantite_kg,
            cout_unitaire=cout_unitaire,
            devise=devise or fiche.devise_cout_reference,
            **options,
        )

    def _position_lue(self, depot_id, article_id):
        return (
            PositionStock.objects
            .filter(depot_id=depot_id, article_id=article_id)
            .first()
        )

    def _diminution(self, plan, depot_id, article_id, quantite_kg, strategie, controle_commercialisable):
        self.catalogue.get_article(article_id)

        position = self._position_lue(depot_id, article_id)
        allocations = strategie.allouer(self.registre, article_id, depot_id, quantite_kg)

        if controle_commercialisable:
            disponible = position.quantite_commercialisable_kg if position else Decimal("0")
            demande = max(quantite_kg, total_alloue(allocations))
            if demande > disponible:
                raise StockInsuffisant(article_id, depot_id, demande, disponible)

        plan.versions[(depot_id, article_id)] = position.version if position else 0
        plan.diminutions.append(
            _Diminution(
                depot_id=depot_id,
                article_id=article_id,
                allocations=allocations,
                reduit_commercialisable=controle_commercialisable,
            )
        )
        return allocations

    def _planifier_entree(self, mouvement):
        self.depots.get_depot(mouvement.depot_id)
        plan = _Plan()

        for ligne in mouvement.lignes:
            plan.augmentations.append(
                self._augmentation(
                    mouvement.depot_id,
                    ligne.article_id,
                    ligne.quantite_kg,
                    ligne.cout_unitaire,
                    ligne.devise,
                    numero_lot=ligne.numero_lot,
                    quarantaine=ligne.quarantaine,
                )
            )
        return plan

    def _planifier_transfert(self, mouvement):
        self.depots.get_depot(mouvement.depot_source_id)
        self.depots.get_depot(mouvement.depot_destination_id)
        plan = _Plan()

        for ligne in mouvement.lignes:
            allocations = self._diminution(
                plan,
                mouvement.depot_source_id,
                ligne.article_id,
                ligne.quantite_kg,
                ligne.allocation or AllocationFIFO(),
                controle_commercialisable=True,
            )

            # Le coût voyage avec le lot physique
            for allocation in allocations:
                lot = allocation.lot
                plan.augmentations.append(
                    _Augmentation(
                        depot_id=mouvement.depot_destination_id,
                        article_id=ligne.article_id,
                        quantite_kg=allocation.quantite_kg,
                        cout_unitaire=lot.cout_unitaire,
                        devise=lot.devise,
                        numero_lot=lot.numero_lot,
                        lot_origine=lot,
                    )
                )
        return plan

    def _planifier_sortie(self, mouvement):
        self.depots.get_depot(mouvement.depot_id)
        plan = _Plan()

        for ligne in mouvement.lignes:
            strategie = _exiger_selection(ligne.allocation, ligne.article_id, mouvement.depot_id)
            self._diminution(
                plan,
                mouvement.depot_id,
                ligne.article_id,
                ligne.quantite_kg,
                strategie,
                controle_commercialisable=True,
            )
        return plan

    def _planifier_ajustement(self, mouvement):
        self.depots.get_depot(mouvement.depot_id)
        plan = _Plan()

        if mouvement.est_positif:
            plan.augmentations.append(
                self._augmentation(
                    mouvement.depot_id,
                    mouvement.article_id,
                    mouvement.delta_kg,
                    mouvement.cout_unitaire,
                    mouvement.devise,
                    numero_lot=mouvement.numero_lot,
                    quarantaine=mouvement.quarantaine,
                )
            )
            return plan

        strategie = _exiger_selection(mouvement.allocation, mouvement.article_id, mouvement.depot_id)
        self._diminution(
            plan,
            mouvement.depot_id,
            mouvement.article_id,
            -mouvement.delta_kg,
            strategie,
            controle_commercialisable=False,
        )
        return plan

    def _planifier_commercialisable(self, mouvement):
        self.depots.get_depot(mouvement.depot_id)
        self.catalogue.get_article(mouvement.article_id)

        position = self._position_lue(mouvement.depot_id, mouvement.article_id)
        self._controler_commercialisable(position, mouvement)

        return _Plan(delta_commercialisable=mouvement.delta_kg)

    def _controler_commercialisable(self, position, mouvement):
        quantite = position.quantite_kg if position else Decimal("0")
        commercialisable = position.quantite_commercialisable_kg if position else Decimal("0")
        nouveau = commercialisable + mouvement.delta_kg

        if nouveau < 0:
            raise StockInsuffisant(
                mouvement.article_id, mouvement.depot_id, -mouvement.delta_kg, commercialisable
            )
        if nouveau > quantite:
            raise ErreurValidation(
                f"Le commercialisable ({nouveau} kg) ne peut pas dépasser "
                f"la quantité en stock ({quantite} kg).",
                champ="delta_kg",
            )
        return nouveau

    # ============================================================
    # APPLICATION (sous verrou)
    # ============================================================

    @transaction.atomic
    def _executer(self, mouvement, plan, utilisateur):
        positions = verrouiller_positions(mouvement.cles())

        for cle, version in plan.versions.items():
            if positions[cle].version != version:
                logger.info("Version de la position %s modifiée depuis la planification", cle)
                raise ModificationConcurrente(*cle)

        journal = MouvementStock.objects.create(
            type_mouvement=mouvement.type_mouvement,
            depot_source_id=self._depot_source(mouvement),
            depot_destination_id=self._depot_destination(mouvement),
            reference=mouvement.reference,
            motif=mouvement.motif,
            date_mouvement=mouvement.date_mouvement or timezone.now(),
            created_by=utilisateur if getattr(utilisateur, "is_authenticated", False) else None,
        )

        lignes = []
        touchees = set()

        for diminution in plan.diminutions:
            cle = (diminution.depot_id, diminution.article_id)
            lignes.extend(self._appliquer_diminution(journal, positions[cle], diminution))
            touchees.add(cle)

        for augmentation in plan.augmentations:
            cle = (augmentation.depot_id, augmentation.article_id)
            lignes.append(self._appliquer_augmentation(journal, positions[cle], augmentation))
            touchees.add(cle)

        if plan.delta_commercialisable is not None:
            cle = (mouvement.depot_id, mouvement.article_id)
            position = positions[cle]
            position.quantite_commercialisable_kg = self._controler_commercialisable(position, mouvement)
            lignes.append(
                LigneMouvementStock(
                    mouvement=journal,
                    article_id=mouvement.article_id,
                    depot_id=mouvement.depot_id,
                    sens=Sens.ENTREE if mouvement.delta_kg > 0 else Sens.SORTIE,
                    quantite_kg=abs(mouvement.delta_kg),
                )
            )
            touchees.add(cle)

        LigneMouvementStock.objects.bulk_create(lignes)

        resultat = []
        for cle in sorted(touchees):
            position = positions[cle]
            position.version += 1
            position.save(
                update_fields=[
                    "quantite_kg",
                    "quantite_commercialisable_kg",
                    "valeur_stock",
                    "cout_moyen_unitaire",
                    "devise",
                    "version",
                    "updated_at",
                ]
            )
            resultat.append(position)

        return ResultatMouvement(mouvement_id=journal.pk, positions=resultat)

    def _appliquer_diminution(self, journal, position, diminution):
        lignes = []
        total = Decimal("0")

        restants = dict(
            Lot.objects
            .filter(pk__in=[a.lot_id for a in diminution.allocations])
            .values_list("pk", "quantite_restante_kg")
        )

        for allocation in diminution.allocations:
            if restants.get(allocation.lot_id) != allocation.restant_kg:
                raise ModificationConcurrente(diminution.depot_id, diminution.article_id)

            lot = self.registre.allouer(allocation.lot, allocation.quantite_kg)
            sortir_de_position(position, allocation.quantite_kg, lot.cout_unitaire_position)
            total += allocation.quantite_kg

            lignes.append(
                LigneMouvementStock(
                    mouvement=journal,
                    article_id=diminution.article_id,
                    depot_id=diminution.depot_id,
                    lot=lot,
                    sens=Sens.SORTIE,
                    quantite_kg=allocation.quantite_kg,
                    cout_unitaire=lot.cout_unitaire,
                    devise=lot.devise,
                )
            )

        if diminution.reduit_commercialisable:
            position.quantite_commercialisable_kg -= total
        else:
            # Les pertes sont d'abord absorbées par le stock non commercialisable
            position.quantite_commercialisable_kg = min(
                position.quantite_commercialisable_kg, position.quantite_kg
            )

        return lignes

    def _appliquer_augmentation(self, journal, position, augmentation):
        taux = None
        if position.devise and position.devise != augmentation.devise:
            taux = self.taux.get_taux()

        cout_base = base_de_cout(position, augmentation.cout_unitaire, augmentation.devise, taux)

        lot = self.registre.creer_lot(
            augmentation.article_id,
            augmentation.depot_id,
            augmentation.quantite_kg,
            augmentation.cout_unitaire,
            augmentation.devise,
            cout_unitaire_position=cout_base,
            numero_lot=augmentation.numero_lot,
            lot_origine=augmentation.lot_origine,
        )

        entrer_en_position(position, augmentation.quantite_kg, cout_base)
        if not augmentation.quarantaine:
            position.quantite_commercialisable_kg += augmentation.quantite_kg

        return LigneMouvementStock(
            mouvement=journal,
            article_id=augmentation.article_id,
            depot_id=augmentation.depot_id,
            lot=lot,
            sens=Sens.ENTREE,
            quantite_kg=augmentation.quantite_kg,
            cout_unitaire=augmentation.cout_unitaire,
            devise=augmentation.devise,
        )

    # ============================================================
    # JOURNAL
    # ============================================================

    @staticmethod
    def _entre_en_depot(mouvement):
        if isinstance(mouvement, Ajustement):
            return mouvement.est_positif
        return mouvement.type_mouvement == TypeMouvement.ENTREE

    @classmethod
    def _depot_source(cls, mouvement):
        if isinstance(mouvement, Transfert):
            return mouvement.depot_source_id
        if cls._entre_en_depot(mouvement):
            return None
        return mouvement.depot_id

    @classmethod
    def _depot_destination(cls, mouvement):
        if isinstance(mouvement, Transfert):
            return mouvement.depot_destination_id
        if cls._entre_en_depot(mouvement):
            return mouvement.depot_id
        return None
