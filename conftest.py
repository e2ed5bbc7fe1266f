from decimal import Decimal

import pytest
from django.apps import apps
from django.core.cache import cache
from rest_framework.test import APIClient

from accounts.constants import UserRole
from accounts.models import Utilisateur
from referentiel.models import Article, Depot


@pytest.fixture(autouse=True)
def vider_cache():
    # Taux du jour et fiches articles
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def services():
    return apps.get_app_config("stocks")


@pytest.fixture
def moteur(services):
    return services.moteur


@pytest.fixture
def depot_a(db):
    return Depot.objects.create(code="NDB-A", intitule="Dépôt A")


@pytest.fixture
def depot_b(db):
    return Depot.objects.create(code="NDB-B", intitule="Dépôt B")


@pytest.fixture
def article(db):
    return Article.objects.create(
        reference="POULPE",
        specification="T6",
        kg_par_carton=Decimal("20"),
        cout_reference=Decimal("4462"),
        devise_cout_reference="MRU",
    )


@pytest.fixture
def gestionnaire(db):
    return Utilisateur.objects.create_user(
        username="gestionnaire",
        password="secret-gestion",
        role=UserRole.GESTIONNAIRE_STOCK,
    )


@pytest.fixture
def magasinier(db, depot_a):
    return Utilisateur.objects.create_user(
        username="magasinier",
        password="secret-magasin",
        role=UserRole.MAGASINIER,
        depot=depot_a,
    )


@pytest.fixture
def lecteur(db):
    return Utilisateur.objects.create_user(
        username="lecteur",
        password="secret-lecteur",
        role=UserRole.LECTEUR,
    )


@pytest.fixture
def api_client(gestionnaire):
    client = APIClient()
    client.force_authenticate(user=gestionnaire)
    return client
