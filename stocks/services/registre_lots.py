# stocks/services/registre_lots.py

import logging
from decimal import Decimal

from django.db.models import F

from stocks.exceptions import ErreurValidation, QuantiteLotInsuffisante
from stocks.models_stock.lot import Lot
from stocks.services.conversion import en_decimal

logger = logging.getLogger(__name__)


class RegistreLots:
    """
    Source de vérité des quantités restantes par lot.

    Les lots sont ajoutés, jamais modifiés en dehors de la quantité
    restante, jamais supprimés.
    """

    # ============================================================
    # LECTURE
    # ============================================================

    def get_lot(self, lot_id):
        return Lot.objects.filter(pk=lot_id).first()

    def get_lots(self, lot_ids):
        return Lot.objects.in_bulk(list(lot_ids))

    def lots_disponibles(self, article_id, depot_id):
        """
        Lots avec du restant pour le couple, du plus ancien au plus récent
        (ordre FIFO). Queryset : chaque itération relit la base.
        """
        return (
            Lot.objects
            .filter(
                article_id=article_id,
                depot_id=depot_id,
                quantite_restante_kg__gt=0,
            )
            .order_by("created_at", "id")
        )

    # ============================================================
    # CRÉATION
    # ============================================================

    def creer_lot(
        self,
        article_id,
        depot_id,
        quantite_kg,
        cout_unitaire,
        devise,
        cout_unitaire_position=None,
        numero_lot="",
        lot_origine=None,
    ) -> Lot:
        quantite_kg = en_decimal(quantite_kg, "quantite_kg")
        cout_unitaire = en_decimal(cout_unitaire, "cout_unitaire")

        if quantite_kg <= 0:
            raise ErreurValidation(
                "La quantité d'un lot doit être strictement positive.",
                champ="quantite_kg",
            )

        if cout_unitaire < 0:
            raise ErreurValidation(
                "Le coût unitaire ne peut pas être négatif.",
                champ="cout_unitaire",
            )

        if cout_unitaire_position is None:
            cout_unitaire_position = cout_unitaire

        lot = Lot.objects.create(
            article_id=article_id,
            depot_id=depot_id,
            numero_lot=numero_lot or "",
            quantite_initiale_kg=quantite_kg,
            quantite_restante_kg=quantite_kg,
            cout_unitaire=cout_unitaire,
            devise=devise,
            cout_unitaire_position=cout_unitaire_position,
            lot_origine=lot_origine,
        )

        logger.debug(
            "Lot %s créé : article=%s depot=%s %s kg @ %s %s",
            lot.numero_lot, article_id, depot_id, quantite_kg, cout_unitaire, devise,
        )
        return lot

    # ============================================================
    # ALLOCATION
    # ============================================================

    def allouer(self, lot, quantite_kg) -> Lot:
        """
        Décrémente le restant du lot d'exactement `quantite_kg`.
        La mise à jour est conditionnelle : elle échoue plutôt que de
        passer sous zéro.
        """
        quantite_kg = en_decimal(quantite_kg, "quantite_kg")

        if quantite_kg <= 0:
            raise ErreurValidation(
                "La quantité allouée doit être strictement positive.",
                champ="quantite_kg",
            )

        updated = (
            Lot.objects
            .filter(pk=lot.pk, quantite_restante_kg__gte=quantite_kg)
            .update(quantite_restante_kg=F("quantite_restante_kg") - quantite_kg)
        )

        if not updated:
            restant = (
                Lot.objects
                .filter(pk=lot.pk)
                .values_list("quantite_restante_kg", flat=True)
                .first()
            )
            raise QuantiteLotInsuffisante(
                lot.pk, quantite_kg, restant if restant is not None else Decimal("0")
            )

        lot.refresh_from_db(fields=["quantite_restante_kg"])
        return lot
