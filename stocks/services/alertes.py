# stocks/services/alertes.py

import logging

from django.db import transaction
from django.utils import timezone

from stocks.constants import StatutAlerte, TypeAlerte
from stocks.exceptions import ErreurValidation
from stocks.models_stock.alerte import AlerteStock
from stocks.models_stock.position import PositionStock
from stocks.services.conversion import en_decimal

logger = logging.getLogger(__name__)


# ============================================================
# SEUIL D'ALERTE
# ============================================================

def definir_seuil(depot_id, article_id, seuil_kg):
    """
    Fixe le seuil d'alerte d'une position (créée si absente).
    Le seuil n'est pas une quantité de stock : la version ne bouge pas.
    """
    seuil_kg = en_decimal(seuil_kg, "seuil_alerte_kg")
    if seuil_kg < 0:
        raise ErreurValidation(
            "Le seuil d'alerte ne peut pas être négatif.",
            champ="seuil_alerte_kg",
        )

    position, _ = PositionStock.objects.get_or_create(
        depot_id=depot_id,
        article_id=article_id,
    )
    PositionStock.objects.filter(pk=position.pk).update(seuil_alerte_kg=seuil_kg)
    position.refresh_from_db()
    return position


# ============================================================
# VÉRIFICATION
# ============================================================

def _type_alerte(position):
    if position.seuil_alerte_kg <= 0:
        return None
    if position.quantite_kg <= 0:
        return TypeAlerte.RUPTURE
    if position.quantite_kg <= position.seuil_alerte_kg:
        return TypeAlerte.STOCK_BAS
    return None


def _message(position, type_alerte):
    if type_alerte == TypeAlerte.RUPTURE:
        return f"Rupture de stock : {position.article} au dépôt {position.depot}."
    return (
        f"Stock bas : {position.article} au dépôt {position.depot} "
        f"({position.quantite_kg} kg pour un seuil de {position.seuil_alerte_kg} kg)."
    )


@transaction.atomic
def verifier_alertes(depot_id=None):
    """
    Une alerte active au plus par position, rafraîchie sur place.
    Les alertes actives d'une position revenue au-dessus du seuil
    passent en RESOLUE. Une alerte ignorée n'est pas recréée tant
    que la position ne change pas de type d'alerte.
    """
    compteurs = {"creees": 0, "mises_a_jour": 0, "resolues": 0}

    positions = PositionStock.objects.select_related("depot", "article")
    if depot_id:
        positions = positions.filter(depot_id=depot_id)

    actives = {
        (a.depot_id, a.article_id): a
        for a in AlerteStock.objects.select_for_update().filter(statut=StatutAlerte.ACTIVE)
    }
    ignorees = set(
        AlerteStock.objects
        .filter(statut=StatutAlerte.IGNOREE)
        .values_list("depot_id", "article_id", "type_alerte")
    )
    positions_ignorees = {(depot, article) for depot, article, _ in ignorees}

    maintenant = timezone.now()

    for position in positions:
        cle = (position.depot_id, position.article_id)
        type_alerte = _type_alerte(position)
        alerte = actives.get(cle)

        if type_alerte is None:
            if alerte is not None:
                alerte.statut = StatutAlerte.RESOLUE
                alerte.resolue_le = maintenant
                alerte.save(update_fields=["statut", "resolue_le", "updated_at"])
                compteurs["resolues"] += 1
            if cle in positions_ignorees:
                AlerteStock.objects.filter(
                    depot_id=position.depot_id,
                    article_id=position.article_id,
                    statut=StatutAlerte.IGNOREE,
                ).update(statut=StatutAlerte.RESOLUE, resolue_le=maintenant)
            continue

        if alerte is None:
            if (cle[0], cle[1], type_alerte) in ignorees:
                continue
            AlerteStock.objects.create(
                depot_id=position.depot_id,
                article_id=position.article_id,
                type_alerte=type_alerte,
                quantite_actuelle_kg=position.quantite_kg,
                seuil_alerte_kg=position.seuil_alerte_kg,
                message=_message(position, type_alerte),
            )
            compteurs["creees"] += 1
            continue

        alerte.type_alerte = type_alerte
        alerte.quantite_actuelle_kg = position.quantite_kg
        alerte.seuil_alerte_kg = position.seuil_alerte_kg
        alerte.message = _message(position, type_alerte)
        alerte.save(
            update_fields=[
                "type_alerte",
                "quantite_actuelle_kg",
                "seuil_alerte_kg",
                "message",
                "updated_at",
            ]
        )
        compteurs["mises_a_jour"] += 1

    logger.info(
        "Alertes stock : %s créée(s), %s mise(s) à jour, %s résolue(s)",
        compteurs["creees"], compteurs["mises_a_jour"], compteurs["resolues"],
    )
    return compteurs


def ignorer_alerte(alerte):
    if alerte.statut != StatutAlerte.ACTIVE:
        raise ErreurValidation(
            "Seule une alerte active peut être ignorée.",
            champ="statut",
        )

    alerte.statut = StatutAlerte.IGNOREE
    alerte.save(update_fields=["statut", "updated_at"])
    return alerte


def alertes_actives(depot_id=None):
    qs = AlerteStock.objects.filter(statut=StatutAlerte.ACTIVE).select_related("depot", "article")
    if depot_id:
        qs = qs.filter(depot_id=depot_id)
    return qs

