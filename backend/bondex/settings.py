import json
import os
import sys
from pathlib import Path
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent
# Try root project .env (one directory up from BASE_DIR) first, then local
root_env = (BASE_DIR.parent / '.env')
local_env = (BASE_DIR / '.env')
if root_env.exists():
    load_dotenv(root_env)
elif local_env.exists():
    load_dotenv(local_env)

# ---------------------------------------------------------------------------
# SECRET KEY HANDLING
# Prefer DJANGO_SECRET_KEY, fall back to SECRET_KEY. Sessions carry the cart,
# so production (DEBUG=False) requires a real key.
# ---------------------------------------------------------------------------
SECRET_KEY = (
    os.getenv('DJANGO_SECRET_KEY')
    or os.getenv('SECRET_KEY')
    or 'dev-secret-key'
)
DEBUG = os.getenv('DEBUG', 'True') == 'True'
ALLOWED_HOSTS = os.getenv('ALLOWED_HOSTS', '*').split(',')

if SECRET_KEY == 'dev-secret-key' and not DEBUG:
    raise ImproperlyConfigured(
        'SECRET_KEY is missing or using insecure default. Set DJANGO_SECRET_KEY or SECRET_KEY env var.'
    )

INSTALLED_APPS = [
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.staticfiles',
    'rest_framework',
    'drf_spectacular',
    'apps.common',
    'apps.catalog',
    'apps.carts',
]

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_PARSER_CLASSES': [
        'rest_framework.parsers.JSONParser',
    ],
    # Storefront visitors are anonymous; the cart is keyed by session only.
    'DEFAULT_AUTHENTICATION_CLASSES': [],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.AllowAny',
    ],
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'EXCEPTION_HANDLER': 'apps.api.exceptions.global_exception_handler',
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'Bondex Safety Storefront API',
    'DESCRIPTION': 'Session cart, discount codes and catalog filtering for the Bondex Safety PPE storefront.',
    'VERSION': '1.0.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
    'SCHEMA_PATH_PREFIX': r'/api',
    'SERVE_PERMISSIONS': [],
}

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'bondex.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
            ],
        },
    },
]

WSGI_APPLICATION = 'bondex.wsgi.application'

# Nothing is modelled in the database; auth/contenttypes tables only back DRF's
# anonymous user.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': os.getenv('SQLITE_PATH', str(BASE_DIR / 'db.sqlite3')),
    }
}

# Caching (Redis by default)
"""Caching configuration.
Sessions, and therefore session-stored carts, live in the cache. Cache
exceptions are ignored so a Redis outage degrades carts to per-request memory
instead of failing requests."""
REDIS_URL = os.getenv('REDIS_URL', 'redis://redis:6379/1')
CACHE_TTL = int(os.getenv('CACHE_TTL', '300'))  # seconds

CACHES = {
    'default': {
        'BACKEND': 'django_redis.cache.RedisCache',
        'LOCATION': REDIS_URL,
        'OPTIONS': {
            'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            'IGNORE_EXCEPTIONS': True,
        },
        'KEY_PREFIX': os.getenv('CACHE_KEY_PREFIX', 'bondex'),
        'TIMEOUT': CACHE_TTL,
    }
}

USING_PYTEST = (
    os.getenv('PYTEST_CURRENT_TEST') is not None
    or any(os.path.basename(arg).startswith('pytest') for arg in sys.argv)
    or 'pytest' in sys.modules
)

if 'test' in sys.argv or USING_PYTEST:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': ':memory:',
        }
    }
    # Use local in-memory cache during tests
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'bondex-test-cache',
            'TIMEOUT': 60,
        }
    }

SESSION_ENGINE = os.getenv('SESSION_ENGINE', 'django.contrib.sessions.backends.cache')
SESSION_COOKIE_AGE = int(os.getenv('SESSION_COOKIE_AGE', str(60 * 60 * 24 * 30)))
SESSION_SAVE_EVERY_REQUEST = False

# ---------------------------------------------------------------------------
# Storefront settings
# ---------------------------------------------------------------------------
# "session" stores the cart blob inside the session, "cache" stores it in its
# own cache entry keyed by session id.
BONDEX_CART_STORAGE = os.getenv('BONDEX_CART_STORAGE', 'session')
if BONDEX_CART_STORAGE not in ('session', 'cache'):
    raise ImproperlyConfigured("BONDEX_CART_STORAGE must be 'session' or 'cache'")
BONDEX_CART_SESSION_KEY = os.getenv('BONDEX_CART_SESSION_KEY', 'cart')
BONDEX_CART_CACHE_TTL = SESSION_COOKIE_AGE

BONDEX_CATALOG_API_URL = os.getenv('BONDEX_CATALOG_API_URL', 'http://localhost:5000/api')
BONDEX_CATALOG_TIMEOUT = float(os.getenv('BONDEX_CATALOG_TIMEOUT', '10'))
BONDEX_CATALOG_PAGE_SIZE = int(os.getenv('BONDEX_CATALOG_PAGE_SIZE', '12'))
BONDEX_PLACEHOLDER_IMAGE_URL = os.getenv(
    'BONDEX_PLACEHOLDER_IMAGE_URL', '/images/placeholder-product.png'
)

# JSON object of code -> {kind, value, description}; unset uses the built-in codes.
_discount_codes_raw = os.getenv('BONDEX_DISCOUNT_CODES')
try:
    BONDEX_DISCOUNT_CODES = json.loads(_discount_codes_raw) if _discount_codes_raw else None
except ValueError as exc:
    raise ImproperlyConfigured(f'BONDEX_DISCOUNT_CODES is not valid JSON: {exc}') from exc

BONDEX_LOG_LEVEL = os.getenv('BONDEX_LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': BONDEX_LOG_LEVEL,
            'propagate': False,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
        },
    },
}

AUTH_PASSWORD_VALIDATORS = []

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Africa/Nairobi'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = os.getenv('STATIC_ROOT', str(BASE_DIR / 'staticfiles'))
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
