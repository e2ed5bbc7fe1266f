# gestion_stock/settings.py
"""
Django settings for gestion_stock project.

Stock poisson multi-dépôts : lots, mouvements, CUMP et valorisation multi-devises.
"""

import os
from pathlib import Path
from datetime import timedelta
from corsheaders.defaults import default_headers

# Base dir
BASE_DIR = Path(__file__).resolve().parent.parent

# SECURITY
SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-change-me')
DEBUG = os.getenv('DEBUG', '1') == '1'

# Hosts
ALLOWED_HOSTS = os.getenv('DJANGO_ALLOWED_HOSTS', 'localhost 127.0.0.1').split()

# Application definition
INSTALLED_APPS = [
    # Django core (ordre critique)
    'django.contrib.contenttypes',
    'django.contrib.auth',

    # Custom user (OBLIGATOIRE avant admin)
    'accounts',

    # Django admin & session
    'django.contrib.admin',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',

    # Third party
    'rest_framework',
    'drf_spectacular',
    'corsheaders',
    'django_filters',

    # Local apps
    'referentiel',
    'stocks.apps.StocksConfig',
]

MIDDLEWARE = [
    'corsheaders.middleware.CorsMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'gestion_stock.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'gestion_stock.wsgi.application'

# -----------------------
# DATABASE CONFIGURATION
# -----------------------
DATABASES = {
    'default': {
        'ENGINE': os.getenv('DB_ENGINE', 'django.db.backends.postgresql'),
        'NAME': os.getenv('DB_NAME', 'gestion_stock_db'),
        'USER': os.getenv('DB_USER', 'gestion_stock'),
        'PASSWORD': os.getenv('DB_PASSWORD', ''),
        'HOST': os.getenv('DB_HOST', '127.0.0.1'),
        'PORT': os.getenv('DB_PORT', '5432'),
    }
}

# Cache (taux de change du jour)
CACHES = {
    'default': {
        'BACKEND': os.getenv(
            'CACHE_BACKEND',
            'django.core.cache.backends.locmem.LocMemCache'
        ),
        'LOCATION': os.getenv('CACHE_LOCATION', 'gestion-stock'),
    }
}

# Custom user
AUTH_USER_MODEL = "accounts.Utilisateur"

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator', 'OPTIONS': {'min_length': 8}},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',},
]

# Internationalization
LANGUAGE_CODE = os.getenv('LANGUAGE_CODE', 'fr-fr')
TIME_ZONE = os.getenv('TIME_ZONE', 'Africa/Nouakchott')
USE_I18N = True
USE_TZ = True

# Static
STATIC_URL = '/static/'
STATIC_ROOT = os.getenv('STATIC_ROOT', BASE_DIR / 'staticfiles')

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# REST Framework
REST_FRAMEWORK = {
    # Auth
    'DEFAULT_AUTHENTICATION_CLASSES': (
        'rest_framework_simplejwt.authentication.JWTAuthentication',
    ),
    'DEFAULT_PERMISSION_CLASSES': (
        'rest_framework.permissions.IsAuthenticated',
    ),

    # Filters
    "DEFAULT_FILTER_BACKENDS": [
        "django_filters.rest_framework.DjangoFilterBackend",
        "rest_framework.filters.OrderingFilter",
    ],

    # Schema
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
}

# Simple JWT
SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(days=int(os.getenv('JWT_ACCESS_DAYS', '7'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.getenv('JWT_REFRESH_DAYS', '30'))),
    'ALGORITHM': 'HS256',
    'SIGNING_KEY': os.getenv('JWT_SIGNING_KEY', SECRET_KEY),
    'AUTH_HEADER_TYPES': ('Bearer',),
}

# Password hashing
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.Argon2PasswordHasher',
    'django.contrib.auth.hashers.PBKDF2PasswordHasher',
]

# drf-spectacular (Swagger/OpenAPI)
SPECTACULAR_SETTINGS = {
    'TITLE': 'Gestion Stock Poisson API',
    'DESCRIPTION': 'Lots, mouvements de stock, CUMP et valorisation multi-dépôts',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
}

# CORS
CORS_ALLOW_ALL_ORIGINS = True
CORS_ALLOW_HEADERS = list(default_headers)

# -----------------------
# MOTEUR DE STOCK
# -----------------------
STOCK_MOTEUR = {
    # Attente maximale (secondes) pour verrouiller une position
    'VERROU_TIMEOUT': float(os.getenv('STOCK_VERROU_TIMEOUT', '5')),
    'VERROU_INTERVALLE': float(os.getenv('STOCK_VERROU_INTERVALLE', '0.05')),
    'TOLERANCE_CONSERVATION_KG': os.getenv('STOCK_TOLERANCE_KG', '0.01'),
}

# Taux de change (base USD, rafraîchis une fois par jour)
TAUX_CHANGE = {
    'URL': os.getenv('TAUX_CHANGE_URL', 'https://api.exchangerate.host/live'),
    'ACCESS_KEY': os.getenv('TAUX_CHANGE_ACCESS_KEY', ''),
    'BASE': 'USD',
    'DEVISES': ['EUR', 'MRU'],
    'TIMEOUT': int(os.getenv('TAUX_CHANGE_TIMEOUT', '10')),
    'CACHE_ALIAS': 'default',
    'SECOURS': {'USD': '1', 'EUR': '0.85', 'MRU': '41.5'},
    # Durée (s) de mise en cache d'une table de repli
    'TTL_REPLI': int(os.getenv('TAUX_CHANGE_TTL_REPLI', '300')),
}

# Calculateur coût de revient (montants en MRU)
COUT_REVIENT_DEFAUTS = {
    'DEVISE_FRAIS': 'MRU',
    'TONNES_PAR_CONTENEUR': '28',
    'TAUX_RETENUE_PCT': '12',
    'FRET_PAR_TONNE': '4165',
    'FRAIS_CONTENEUR': {
        'label': '1400',
        'dhl': '4000',
        'transit': '13000',
        'manutention': '8475',
        'facture_armateur': '2300',
        'branchement': '8750',
        'frais_chargement': '4000',
    },
    # Prix SMCP retenu quand l'article n'en porte pas
    'SMCP_DEFAUT': '4462',
}

# Logging
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {'standard': {'format': '[%(asctime)s] %(levelname)s %(name)s: %(message)s'},},
    'handlers': {'console': {'class': 'logging.StreamHandler', 'formatter': 'standard'},},
    'root': {'handlers': ['console'], 'level': os.getenv('DJANGO_LOG_LEVEL', 'INFO')},
    'loggers': {
        'stocks': {
            'handlers': ['console'],
            'level': os.getenv('STOCK_LOG_LEVEL', 'INFO'),
            'propagate': False,
        },
    },
}

# Security for prod (not active)
SECURE_SSL_REDIRECT = os.getenv('SECURE_SSL_REDIRECT', '0') == '1'
SESSION_COOKIE_SECURE = os.getenv('SESSION_COOKIE_SECURE', '0') == '1'
CSRF_COOKIE_SECURE = os.getenv('CSRF_COOKIE_SECURE', '0') == '1'
