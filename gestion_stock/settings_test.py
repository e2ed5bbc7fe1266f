# gestion_stock/settings_test.py

from .settings import *  # noqa: F401,F403

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'gestion-stock-tests',
    }
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

# Aucun appel réseau pendant les tests
TAUX_CHANGE = {
    **TAUX_CHANGE,  # noqa: F405
    'URL': '',
}

STOCK_MOTEUR = {
    **STOCK_MOTEUR,  # noqa: F405
    'VERROU_TIMEOUT': 0.5,
}
