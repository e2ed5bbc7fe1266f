from decimal import Decimal
from unittest import mock

from django.db import DatabaseError
from django.db.models import F, Sum
from django.test import TestCase

from referentiel.models import Article, Depot
from stocks.constants import Sens, StatutMouvement, TypeMouvement
from stocks.exceptions import (
    ErreurConservationQuantite,
    ErreurValidation,
    LotIncompatible,
    ModificationConcurrente,
    QuantiteLotInsuffisante,
    SelectionLotManquante,
    StockInsuffisant,
)
from stocks.models_stock.lot import Lot
from stocks.models_stock.mouvement import LigneMouvementStock, MouvementStock
from stocks.models_stock.position import PositionStock
from stocks.services.allocation import AllocationFIFO, AllocationManuelle, SelectionLot
from stocks.services.commandes import (
    Ajustement,
    Entree,
    LigneEntree,
    LigneSortie,
    Mouvement,
    Sortie,
    Transfert,
)
from stocks.services.conversion import kg_depuis_cartons
from stocks.services.valorisation import cump_lots
from stocks.tests.helpers import entrer, moteur, position


class MouvementsTestCase(TestCase):

    def setUp(self):
        self.depot_a = Depot.objects.create(code="A", intitule="Dépôt A")
        self.depot_b = Depot.objects.create(code="B", intitule="Dépôt B")
        self.article = Article.objects.create(reference="POULPE", kg_par_carton=Decimal("20"))
        self.moteur = moteur()

    def _lots(self, depot):
        return list(Lot.objects.filter(depot=depot, article=self.article).order_by("created_at", "id"))

    def _sortie(self, depot, quantite, selections):
        return Sortie(
            depot_id=depot.pk,
            lignes=[
                LigneSortie(
                    article_id=self.article.pk,
                    quantite_kg=Decimal(quantite),
                    allocation=AllocationManuelle(selections),
                )
            ],
        )

    def _scenario_a(self):
        entrer(self.depot_a, self.article, 1000, 10)
        entrer(self.depot_a, self.article, 500, 16)
        return self._lots(self.depot_a)

    # ------------------------------------------------------------
    # ENTRÉES / CUMP
    # ------------------------------------------------------------

    def test_premiere_entree_cree_position_et_lot(self):
        resultat = entrer(self.depot_a, self.article, 1000, 10)

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("1000"))
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("1000"))
        self.assertEqual(pos.cout_moyen_unitaire, Decimal("10"))
        self.assertEqual(pos.devise, "MRU")
        self.assertEqual(pos.version, 1)

        lot = Lot.objects.get()
        self.assertEqual(lot.quantite_initiale_kg, Decimal("1000"))
        self.assertEqual(lot.quantite_restante_kg, Decimal("1000"))
        self.assertTrue(lot.numero_lot.startswith("LOT-POULPE-"))

        journal = MouvementStock.objects.get(pk=resultat.mouvement_id)
        self.assertEqual(journal.type_mouvement, TypeMouvement.ENTREE)
        self.assertEqual(journal.depot_destination, self.depot_a)
        self.assertIsNone(journal.depot_source)
        self.assertEqual(journal.lignes.get().sens, Sens.ENTREE)

    def test_cump_deux_entrees(self):
        self._scenario_a()

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("1500"))
        self.assertEqual(pos.cout_moyen_unitaire, Decimal("12"))

    def test_cump_independant_de_l_ordre_des_entrees(self):
        entrer(self.depot_a, self.article, 1000, 10)
        entrer(self.depot_a, self.article, 500, 16)
        entrer(self.depot_b, self.article, 500, 16)
        entrer(self.depot_b, self.article, 1000, 10)

        self.assertEqual(
            position(self.depot_a, self.article).cout_moyen_unitaire,
            position(self.depot_b, self.article).cout_moyen_unitaire,
        )

    def test_entree_en_quarantaine_non_commercialisable(self):
        entrer(self.depot_a, self.article, 400, 10, quarantaine=True)

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("400"))
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("0"))

    def test_entree_depot_inconnu_rejetee(self):
        depot_fantome = Depot(pk=9999, code="X", intitule="X")

        with self.assertRaises(ErreurValidation):
            entrer(depot_fantome, self.article, 100, 10)

        self.assertFalse(PositionStock.objects.exists())
        self.assertFalse(MouvementStock.objects.exists())

    def test_entree_dans_autre_devise_fige_la_base_de_cout(self):
        entrer(self.depot_a, self.article, 1000, 10, devise="MRU")
        entrer(self.depot_a, self.article, 100, 1, devise="EUR")

        lot_eur = Lot.objects.get(devise="EUR")
        # 1 EUR × 41.5 / 0.85 (table de secours)
        self.assertEqual(lot_eur.cout_unitaire, Decimal("1"))
        self.assertEqual(lot_eur.cout_unitaire_position, Decimal("48.823529"))

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.devise, "MRU")
        self.assertEqual(pos.quantite_kg, Decimal("1100"))

    # ------------------------------------------------------------
    # TRANSFERTS
    # ------------------------------------------------------------

    def test_transfert_fifo_recalcule_cump_source(self):
        lot1, lot2 = self._scenario_a()

        resultat = self.moteur.appliquer(
            Transfert(
                depot_source_id=self.depot_a.pk,
                depot_destination_id=self.depot_b.pk,
                lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("300"))],
            )
        )

        lot1.refresh_from_db()
        lot2.refresh_from_db()
        self.assertEqual(lot1.quantite_restante_kg, Decimal("700"))
        self.assertEqual(lot2.quantite_restante_kg, Decimal("500"))

        source = position(self.depot_a, self.article)
        self.assertEqual(source.quantite_kg, Decimal("1200"))
        self.assertEqual(source.cout_moyen_unitaire, Decimal("12.5"))
        self.assertEqual(source.cout_moyen_unitaire, cump_lots(self._lots(self.depot_a)))

        destination = position(self.depot_b, self.article)
        self.assertEqual(destination.quantite_kg, Decimal("300"))
        self.assertEqual(destination.cout_moyen_unitaire, Decimal("10"))

        lot_b = Lot.objects.get(depot=self.depot_b)
        self.assertEqual(lot_b.lot_origine, lot1)
        self.assertEqual(lot_b.numero_lot, lot1.numero_lot)
        self.assertEqual(lot_b.cout_unitaire, Decimal("10"))

        self.assertEqual(len(resultat.positions), 2)
        journal = MouvementStock.objects.get(pk=resultat.mouvement_id)
        self.assertEqual(journal.depot_source, self.depot_a)
        self.assertEqual(journal.depot_destination, self.depot_b)
        self.assertEqual(journal.lignes.filter(sens=Sens.SORTIE).count(), 1)
        self.assertEqual(journal.lignes.filter(sens=Sens.ENTREE).count(), 1)

    def test_transfert_sur_plusieurs_lots(self):
        self._scenario_a()

        self.moteur.appliquer(
            Transfert(
                depot_source_id=self.depot_a.pk,
                depot_destination_id=self.depot_b.pk,
                lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("1200"))],
            )
        )

        destination = position(self.depot_b, self.article)
        # 1000 × 10 + 200 × 16
        self.assertEqual(destination.quantite_kg, Decimal("1200"))
        self.assertEqual(destination.cout_moyen_unitaire, Decimal("11"))
        self.assertEqual(Lot.objects.filter(depot=self.depot_b).count(), 2)

        source = position(self.depot_a, self.article)
        self.assertEqual(source.quantite_kg, Decimal("300"))
        self.assertEqual(source.cout_moyen_unitaire, Decimal("16"))

    def test_transfert_stock_insuffisant(self):
        entrer(self.depot_a, self.article, 100, 10)

        mouvement = Transfert(
            depot_source_id=self.depot_a.pk,
            depot_destination_id=self.depot_b.pk,
            lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("150"))],
        )
        with self.assertRaises(StockInsuffisant) as ctx:
            self.moteur.appliquer(mouvement)

        self.assertEqual(ctx.exception.manque_kg, Decimal("50"))
        self.assertEqual(mouvement.statut, StatutMouvement.REJETE)
        self.assertIs(mouvement.erreur, ctx.exception)
        self.assertFalse(PositionStock.objects.filter(depot=self.depot_b).exists())

    def test_transfert_limite_au_commercialisable(self):
        entrer(self.depot_a, self.article, 100, 10, quarantaine=True)

        with self.assertRaises(StockInsuffisant):
            self.moteur.appliquer(
                Transfert(
                    depot_source_id=self.depot_a.pk,
                    depot_destination_id=self.depot_b.pk,
                    lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("10"))],
                )
            )

    def test_transfert_vers_le_meme_depot_refuse(self):
        with self.assertRaises(ErreurValidation):
            Transfert(
                depot_source_id=self.depot_a.pk,
                depot_destination_id=self.depot_a.pk,
                lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("10"))],
            )

    # ------------------------------------------------------------
    # SORTIES
    # ------------------------------------------------------------

    def test_sortie_avec_selection_manuelle(self):
        lot1, lot2 = self._scenario_a()

        self.moteur.appliquer(
            self._sortie(self.depot_a, "200", [SelectionLot(lot_id=lot2.pk, quantite_kg=Decimal("200"))])
        )

        lot2.refresh_from_db()
        self.assertEqual(lot2.quantite_restante_kg, Decimal("300"))

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("1300"))
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("1300"))
        # (1000 × 10 + 300 × 16) / 1300
        self.assertEqual(pos.cout_moyen_unitaire, Decimal("11.384615"))

        ligne = LigneMouvementStock.objects.get(sens=Sens.SORTIE)
        self.assertEqual(ligne.lot, lot2)
        self.assertEqual(ligne.cout_unitaire, Decimal("16"))

    def test_sortie_sans_selection_refusee(self):
        self._scenario_a()

        with self.assertRaises(SelectionLotManquante):
            self.moteur.appliquer(
                Sortie(
                    depot_id=self.depot_a.pk,
                    lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("100"))],
                )
            )

    def test_sortie_fifo_refusee(self):
        self._scenario_a()

        with self.assertRaises(SelectionLotManquante):
            self.moteur.appliquer(
                Sortie(
                    depot_id=self.depot_a.pk,
                    lignes=[
                        LigneSortie(
                            article_id=self.article.pk,
                            quantite_kg=Decimal("100"),
                            allocation=AllocationFIFO(),
                        )
                    ],
                )
            )

    def test_sortie_selection_ne_couvre_pas_la_quantite(self):
        lot1, _ = self._scenario_a()

        with self.assertRaises(ErreurConservationQuantite) as ctx:
            self.moteur.appliquer(
                self._sortie(self.depot_a, "100", [{"lot_id": lot1.pk, "quantite_kg": "90"}])
            )

        self.assertEqual(ctx.exception.ecart_kg, Decimal("-10"))
        lot1.refresh_from_db()
        self.assertEqual(lot1.quantite_restante_kg, Decimal("1000"))

    def test_sortie_selection_dans_la_tolerance(self):
        lot1, _ = self._scenario_a()

        self.moteur.appliquer(
            self._sortie(self.depot_a, "100", [{"lot_id": lot1.pk, "quantite_kg": "100.005"}])
        )

        lot1.refresh_from_db()
        self.assertEqual(lot1.quantite_restante_kg, Decimal("899.995"))
        self.assertEqual(position(self.depot_a, self.article).quantite_kg, Decimal("1399.995"))

    def test_sortie_lot_d_un_autre_depot(self):
        self._scenario_a()
        entrer(self.depot_b, self.article, 100, 10)
        lot_b = Lot.objects.get(depot=self.depot_b)

        with self.assertRaises(LotIncompatible):
            self.moteur.appliquer(
                self._sortie(self.depot_a, "50", [{"lot_id": lot_b.pk, "quantite_kg": "50"}])
            )

    def test_sortie_depasse_le_restant_du_lot(self):
        _, lot2 = self._scenario_a()

        with self.assertRaises(QuantiteLotInsuffisante) as ctx:
            self.moteur.appliquer(
                self._sortie(self.depot_a, "600", [{"lot_id": lot2.pk, "quantite_kg": "600"}])
            )

        self.assertEqual(ctx.exception.manque_kg, Decimal("100"))

    def test_sortie_videe_conserve_le_dernier_cump(self):
        entrer(self.depot_a, self.article, 100, 10)
        lot = Lot.objects.get()

        self.moteur.appliquer(
            self._sortie(self.depot_a, "100", [{"lot_id": lot.pk, "quantite_kg": "100"}])
        )

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("0"))
        self.assertEqual(pos.valeur_stock, Decimal("0"))
        self.assertEqual(pos.cout_moyen_unitaire, Decimal("10"))

        lot.refresh_from_db()
        self.assertTrue(lot.epuise)

    # ------------------------------------------------------------
    # AJUSTEMENTS
    # ------------------------------------------------------------

    def test_ajustement_negatif_sans_selection(self):
        self._scenario_a()
        avant = position(self.depot_a, self.article)

        with self.assertRaises(SelectionLotManquante):
            self.moteur.ajuster_position(self.depot_a.pk, self.article.pk, Decimal("-50"))

        apres = position(self.depot_a, self.article)
        self.assertEqual(apres.quantite_kg, avant.quantite_kg)
        self.assertEqual(apres.version, avant.version)

    def test_ajustement_negatif_absorbe_d_abord_la_quarantaine(self):
        entrer(self.depot_a, self.article, 1000, 10)
        self.moteur.ajuster_commercialisable(self.depot_a.pk, self.article.pk, Decimal("-400"))
        lot = Lot.objects.get()

        pos = self.moteur.ajuster_position(
            self.depot_a.pk,
            self.article.pk,
            Decimal("-300"),
            selection=[{"lot_id": lot.pk, "quantite_kg": Decimal("300")}],
        )
        self.assertEqual(pos.quantite_kg, Decimal("700"))
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("600"))

        pos = self.moteur.ajuster_position(
            self.depot_a.pk,
            self.article.pk,
            Decimal("-200"),
            selection=[{"lot_id": lot.pk, "quantite_kg": Decimal("200")}],
        )
        self.assertEqual(pos.quantite_kg, Decimal("500"))
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("500"))

    def test_ajustement_positif_cree_un_lot(self):
        entrer(self.depot_a, self.article, 1000, 10)

        pos = self.moteur.ajuster_position(
            self.depot_a.pk, self.article.pk, Decimal("500"), cout_unitaire=Decimal("16")
        )

        self.assertEqual(pos.quantite_kg, Decimal("1500"))
        self.assertEqual(pos.cout_moyen_unitaire, Decimal("12"))
        self.assertEqual(Lot.objects.count(), 2)

        journal = MouvementStock.objects.filter(type_mouvement=TypeMouvement.AJUSTEMENT).get()
        self.assertEqual(journal.depot_destination, self.depot_a)

    def test_ajustement_positif_sans_cout_refuse(self):
        with self.assertRaises(ErreurValidation):
            Ajustement(depot_id=self.depot_a.pk, article_id=self.article.pk, delta_kg=Decimal("10"))

    def test_ajustement_nul_refuse(self):
        with self.assertRaises(ErreurValidation):
            Ajustement(depot_id=self.depot_a.pk, article_id=self.article.pk, delta_kg=0)

    # ------------------------------------------------------------
    # COMMERCIALISABLE
    # ------------------------------------------------------------

    def test_commercialisable_borne_par_la_quantite(self):
        entrer(self.depot_a, self.article, 1000, 10, quarantaine=True)

        pos = self.moteur.ajuster_commercialisable(self.depot_a.pk, self.article.pk, Decimal("600"))
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("600"))
        self.assertEqual(pos.quantite_non_commercialisable_kg, Decimal("400"))

        with self.assertRaises(ErreurValidation):
            self.moteur.ajuster_commercialisable(self.depot_a.pk, self.article.pk, Decimal("500"))

        with self.assertRaises(StockInsuffisant):
            self.moteur.ajuster_commercialisable(self.depot_a.pk, self.article.pk, Decimal("-700"))

        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_commercialisable_kg, Decimal("600"))
        self.assertEqual(pos.quantite_kg, Decimal("1000"))

    def test_commercialisable_journalise(self):
        entrer(self.depot_a, self.article, 1000, 10)
        self.moteur.ajuster_commercialisable(self.depot_a.pk, self.article.pk, Decimal("-250"))

        ligne = LigneMouvementStock.objects.get(
            mouvement__type_mouvement=TypeMouvement.AJUSTEMENT_COMMERCIALISABLE
        )
        self.assertEqual(ligne.sens, Sens.SORTIE)
        self.assertEqual(ligne.quantite_kg, Decimal("250"))
        self.assertIsNone(ligne.lot)

    # ------------------------------------------------------------
    # INVARIANTS
    # ------------------------------------------------------------

    def test_somme_des_lots_egale_la_position(self):
        lot1, lot2 = self._scenario_a()

        self.moteur.appliquer(
            Transfert(
                depot_source_id=self.depot_a.pk,
                depot_destination_id=self.depot_b.pk,
                lignes=[LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("1100"))],
            )
        )
        self.moteur.appliquer(
            self._sortie(self.depot_a, "150", [{"lot_id": lot2.pk, "quantite_kg": "150"}])
        )
        self.moteur.ajuster_position(self.depot_b.pk, self.article.pk, Decimal("40"), cout_unitaire=Decimal("12"))

        for depot in (self.depot_a, self.depot_b):
            pos = position(depot, self.article)
            total = Lot.objects.filter(depot=depot, article=self.article).aggregate(
                total=Sum("quantite_restante_kg")
            )["total"]
            self.assertEqual(total, pos.quantite_kg)
            self.assertEqual(pos.cout_moyen_unitaire, cump_lots(self._lots(depot)))

    def _total_lots(self, depot, article):
        return Lot.objects.filter(depot=depot, article=article).aggregate(
            total=Sum("quantite_restante_kg")
        )["total"]

    def test_cartons_fractionnaires_puis_transfert_total(self):
        seiche = Article.objects.create(reference="SEICHE", kg_par_carton=Decimal("12.345"))
        quantite = kg_depuis_cartons(Decimal("1.001"), seiche.kg_par_carton)

        entrer(self.depot_a, seiche, quantite, 10)
        entrer(self.depot_a, seiche, quantite, 10)

        pos = position(self.depot_a, seiche)
        self.assertEqual(pos.quantite_kg, Decimal("24.714"))
        self.assertEqual(self._total_lots(self.depot_a, seiche), pos.quantite_kg)

        self.moteur.appliquer(
            Transfert(
                depot_source_id=self.depot_a.pk,
                depot_destination_id=self.depot_b.pk,
                lignes=[LigneSortie(article_id=seiche.pk, quantite_kg=pos.quantite_kg)],
            )
        )

        source = position(self.depot_a, seiche)
        self.assertEqual(source.quantite_kg, Decimal("0"))
        self.assertEqual(source.quantite_commercialisable_kg, Decimal("0"))
        self.assertEqual(source.valeur_stock, Decimal("0"))
        self.assertEqual(self._total_lots(self.depot_a, seiche), Decimal("0"))

        destination = position(self.depot_b, seiche)
        self.assertEqual(destination.quantite_kg, Decimal("24.714"))
        self.assertEqual(self._total_lots(self.depot_b, seiche), destination.quantite_kg)
        self.assertEqual(destination.cout_moyen_unitaire, Decimal("10"))

    def test_deux_lignes_au_demi_gramme(self):
        self.moteur.appliquer(
            Entree(
                depot_id=self.depot_a.pk,
                lignes=[
                    LigneEntree(article_id=self.article.pk, quantite_kg=Decimal("10.0005"), cout_unitaire=Decimal("10")),
                    LigneEntree(article_id=self.article.pk, quantite_kg=Decimal("20.0005"), cout_unitaire=Decimal("10")),
                ],
            )
        )

        self.assertEqual(
            sorted(lot.quantite_initiale_kg for lot in self._lots(self.depot_a)),
            [Decimal("10.001"), Decimal("20.001")],
        )
        pos = position(self.depot_a, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("30.002"))
        self.assertEqual(self._total_lots(self.depot_a, self.article), pos.quantite_kg)
        self.assertEqual(pos.valeur_stock, Decimal("300.02"))

    def test_quantite_sous_le_gramme_refusee(self):
        with self.assertRaises(ErreurValidation):
            LigneEntree(article_id=self.article.pk, quantite_kg=Decimal("0.0004"), cout_unitaire=Decimal("10"))

        with self.assertRaises(ErreurValidation):
            LigneSortie(article_id=self.article.pk, quantite_kg=Decimal("0.0004"))

        with self.assertRaises(ErreurValidation):
            Ajustement(depot_id=self.depot_a.pk, article_id=self.article.pk, delta_kg=Decimal("-0.0004"))

        with self.assertRaises(ErreurValidation):
            AllocationManuelle([{"lot_id": 1, "quantite_kg": "0.0004"}])

        self.assertFalse(Lot.objects.exists())
        self.assertFalse(PositionStock.objects.exists())

    def test_mouvement_de_base_non_instanciable(self):
        with self.assertRaises(TypeError):
            Mouvement()

    def test_mouvement_deja_applique_ne_se_rejoue_pas(self):
        entrer(self.depot_a, self.article, 100, 10)
        lot = Lot.objects.get()
        mouvement = self._sortie(self.depot_a, "10", [{"lot_id": lot.pk, "quantite_kg": "10"}])

        self.moteur.appliquer(mouvement)
        self.assertEqual(mouvement.statut, StatutMouvement.APPLIQUE)

        with self.assertRaises(ErreurValidation):
            self.moteur.appliquer(mouvement)

        self.assertEqual(position(self.depot_a, self.article).quantite_kg, Decimal("90"))


class ConcurrenceTestCase(TestCase):
    """
    Changements survenus entre la planification (sans verrou)
    et l'application (sous verrou).
    """

    def setUp(self):
        self.depot = Depot.objects.create(code="A", intitule="Dépôt A")
        self.article = Article.objects.create(reference="SEICHE")
        self.moteur = moteur()
        entrer(self.depot, self.article, 100, 10)
        self.lot = Lot.objects.get()

    def _planifier_puis(self, effet):
        original = self.moteur._planifier

        def planifier(mouvement):
            plan = original(mouvement)
            effet()
            return plan

        return mock.patch.object(self.moteur, "_planifier", side_effect=planifier)

    def _sortie(self):
        return Sortie(
            depot_id=self.depot.pk,
            lignes=[
                LigneSortie(
                    article_id=self.article.pk,
                    quantite_kg=Decimal("60"),
                    allocation=AllocationManuelle([{"lot_id": self.lot.pk, "quantite_kg": "60"}]),
                )
            ],
        )

    def test_version_modifiee_rejette_le_mouvement(self):
        def concurrent():
            PositionStock.objects.filter(depot=self.depot).update(version=F("version") + 1)

        mouvement = self._sortie()
        with self._planifier_puis(concurrent):
            with self.assertRaises(ModificationConcurrente):
                self.moteur.appliquer(mouvement)

        self.assertEqual(mouvement.statut, StatutMouvement.REJETE)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantite_restante_kg, Decimal("100"))
        self.assertEqual(MouvementStock.objects.count(), 1)

    def test_restant_du_lot_modifie_annule_tout(self):
        def concurrent():
            Lot.objects.filter(pk=self.lot.pk).update(quantite_restante_kg=Decimal("50"))

        with self._planifier_puis(concurrent):
            with self.assertRaises(ModificationConcurrente):
                self.moteur.appliquer(self._sortie())

        # Journal et position inchangés
        self.assertEqual(MouvementStock.objects.count(), 1)
        self.assertEqual(LigneMouvementStock.objects.count(), 1)
        pos = position(self.depot, self.article)
        self.assertEqual(pos.quantite_kg, Decimal("100"))
        self.assertEqual(pos.version, 1)

    def test_erreur_base_de_donnees_rejette_le_mouvement(self):
        mouvement = self._sortie()

        with mock.patch.object(
            self.moteur, "_executer", side_effect=DatabaseError("connexion perdue")
        ):
            with self.assertRaises(DatabaseError):
                self.moteur.appliquer(mouvement)

        self.assertEqual(mouvement.statut, StatutMouvement.REJETE)
        self.assertIsInstance(mouvement.erreur, DatabaseError)
        self.lot.refresh_from_db()
        self.assertEqual(self.lot.quantite_restante_kg, Decimal("100"))
