# stocks/services/verrous.py
"""
Verrouillage des positions (exclusion mutuelle par couple dépôt / article).

À appeler dans un transaction.atomic : les verrous de ligne sont
conservés jusqu'au commit de la transaction englobante.
"""

import logging
import time

from django.conf import settings
from django.db import OperationalError, transaction

from stocks.exceptions import VerrouIndisponible
from stocks.models_stock.position import PositionStock

logger = logging.getLogger(__name__)


def _parametres():
    config = getattr(settings, "STOCK_MOTEUR", {})
    return (
        float(config.get("VERROU_TIMEOUT", 5)),
        float(config.get("VERROU_INTERVALLE", 0.05)),
    )


def verrouiller_position(depot_id, article_id, timeout=None, intervalle=None):
    """
    Verrouille la position (créée si absente) et la retourne relue.

    SELECT ... FOR UPDATE NOWAIT dans un savepoint, retenté jusqu'à
    l'échéance, puis VerrouIndisponible.
    """
    defaut_timeout, defaut_intervalle = _parametres()
    timeout = defaut_timeout if timeout is None else timeout
    intervalle = defaut_intervalle if intervalle is None else intervalle

    position, created = PositionStock.objects.get_or_create(
        depot_id=depot_id,
        article_id=article_id,
    )
    if created:
        logger.info(
            "Position créée : depot=%s article=%s", depot_id, article_id
        )

    echeance = time.monotonic() + timeout
    tentatives = 0

    while True:
        tentatives += 1
        try:
            with transaction.atomic():
                return (
                    PositionStock.objects
                    .select_for_update(nowait=True)
                    .get(pk=position.pk)
                )
        except OperationalError:
            if time.monotonic() >= echeance:
                logger.warning(
                    "Verrou indisponible : depot=%s article=%s (%s tentatives)",
                    depot_id, article_id, tentatives,
                )
                raise VerrouIndisponible(depot_id, article_id)
            time.sleep(intervalle)


def verrouiller_positions(cles, timeout=None, intervalle=None):
    """
    Verrouille plusieurs positions dans l'ordre global (depot_id, article_id) :
    deux mouvements qui se croisent ne peuvent pas s'interbloquer.
    """
    positions = {}
    for depot_id, article_id in sorted(set(cles)):
        positions[(depot_id, article_id)] = verrouiller_position(
            depot_id, article_id, timeout=timeout, intervalle=intervalle
        )
    return positions
