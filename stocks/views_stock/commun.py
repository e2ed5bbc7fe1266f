# stocks/views_stock/commun.py

from django.apps import apps

from referentiel.constants import Devise, DEVISE_PAR_DEFAUT
from stocks.exceptions import ErreurValidation


def services():
    """Services construits par StocksConfig.ready()."""
    return apps.get_app_config("stocks")


def devise_demandee(request):
    devise = request.query_params.get("devise") or DEVISE_PAR_DEFAUT
    if devise not in Devise.values:
        raise ErreurValidation(f"Devise inconnue : {devise}.", champ="devise")
    return devise


def entier_optionnel(request, nom):
    valeur = request.query_params.get(nom)
    if valeur in (None, ""):
        return None
    try:
        return int(valeur)
    except ValueError:
        raise ErreurValidation(f"Paramètre {nom} invalide.", champ=nom)
