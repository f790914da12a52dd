"""
Django settings for the clipping marketplace backend.

Values are read from the environment; a ``.env`` file at the repository root
is loaded first so local development does not need exported variables.
"""
import os
from decimal import Decimal
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR.parent / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {'1', 'true', 'yes', 'on'}


def env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-local-development-key')
DEBUG = env_bool('DJANGO_DEBUG', False)
ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1')

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    # Third party
    'rest_framework',
    'rest_framework.authtoken',
    'django_filters',
    # Local apps
    'accounts.apps.AccountConfig',
    'campaigns',
    'submissions',
    'tracking',
    'payouts',
    'support',
    'notifications',
    'audit',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'audit.middleware.ApiAuditMiddleware',
]

ROOT_URLCONF = 'backend.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'backend.wsgi.application'

# Database
DB_ENGINE = os.getenv('DB_ENGINE', 'django.db.backends.sqlite3')
if DB_ENGINE.endswith('sqlite3'):
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': DB_ENGINE,
            'NAME': os.getenv('DB_NAME', 'clipping'),
            'USER': os.getenv('DB_USER', 'postgres'),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '60')),
        }
    }

AUTH_USER_MODEL = 'accounts.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# Django REST framework
REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.TokenAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'DEFAULT_PAGINATION_CLASS': 'backend.pagination.BoundedPageNumberPagination',
    'PAGE_SIZE': 20,
    'EXCEPTION_HANDLER': 'backend.exceptions.api_exception_handler',
    'DEFAULT_THROTTLE_RATES': {
        'submission_create': os.getenv('THROTTLE_SUBMISSION_CREATE', '10/min'),
        'payout_request': os.getenv('THROTTLE_PAYOUT_REQUEST', '3/hour'),
        'client_portal': os.getenv('THROTTLE_CLIENT_PORTAL', '60/min'),
    },
}

# Cache (throttling state)
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'clipping-default',
    }
}
REDIS_CACHE_URL = os.getenv('REDIS_CACHE_URL')
if REDIS_CACHE_URL:
    CACHES['default'] = {
        'BACKEND': 'django.core.cache.backends.redis.RedisCache',
        'LOCATION': REDIS_CACHE_URL,
    }

# Celery
CELERY_BROKER_URL = os.getenv('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.getenv('CELERY_RESULT_BACKEND', 'redis://localhost:6379/1')
CELERY_TASK_ALWAYS_EAGER = env_bool('CELERY_TASK_ALWAYS_EAGER', False)
CELERY_TASK_EAGER_PROPAGATES = True

# Scraping
APIFY_API_TOKEN = os.getenv('APIFY_API_TOKEN', os.getenv('APIFY_API_KEY', ''))
APIFY_ACTORS = {
    'TIKTOK': os.getenv('APIFY_TIKTOK_ACTOR', 'clockworks~tiktok-scraper'),
    'YOUTUBE': os.getenv('APIFY_YOUTUBE_ACTOR', 'streamers~youtube-shorts-scraper'),
    'INSTAGRAM': os.getenv('APIFY_INSTAGRAM_ACTOR', 'apify~instagram-scraper'),
    'TWITTER': os.getenv('APIFY_TWITTER_ACTOR', 'apidojo~tweet-scraper'),
}
SCRAPE_TIMEOUT_SECONDS = int(os.getenv('SCRAPE_TIMEOUT_SECONDS', '60'))
HTML_SCRAPE_USER_AGENT = os.getenv(
    'HTML_SCRAPE_USER_AGENT',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/124.0 Safari/537.36',
)

# View tracking loop
VIEW_TRACKING_MAX_DURATION_SECONDS = int(os.getenv('VIEW_TRACKING_MAX_DURATION_SECONDS', '270'))
VIEW_TRACKING_MAX_CLIPS = int(os.getenv('VIEW_TRACKING_MAX_CLIPS', '150'))
VIEW_TRACKING_DELAY_SECONDS = float(os.getenv('VIEW_TRACKING_DELAY_SECONDS', '0.5'))
VIEW_TRACKING_MIN_REMAINING_SECONDS = int(os.getenv('VIEW_TRACKING_MIN_REMAINING_SECONDS', '20'))
VIEW_TRACKING_LOCK_MINUTES = int(os.getenv('VIEW_TRACKING_LOCK_MINUTES', '20'))
CRON_LOG_RETENTION_DAYS = int(os.getenv('CRON_LOG_RETENTION_DAYS', '30'))
CRON_SECRET = os.getenv('CRON_SECRET', '')

# Earnings and payouts
CLIP_EARNINGS_CAP_RATIO = Decimal(os.getenv('CLIP_EARNINGS_CAP_RATIO', '0.30'))
CAMPAIGN_COMPLETION_THRESHOLD = Decimal(os.getenv('CAMPAIGN_COMPLETION_THRESHOLD', '1.00'))
PAYOUT_MINIMUM_AMOUNT = Decimal(os.getenv('PAYOUT_MINIMUM_AMOUNT', '20.00'))
PAYOUT_DEFAULT_FEE_RATE = Decimal(os.getenv('PAYOUT_DEFAULT_FEE_RATE', '0.10'))

CLIENT_PORTAL_BASE_URL = os.getenv('CLIENT_PORTAL_BASE_URL', 'http://localhost:3000')

# Default admin account created after migrations (local development only)
DEFAULT_ADMIN_USERNAME = os.getenv('DEFAULT_ADMIN_USERNAME', '')
DEFAULT_ADMIN_EMAIL = os.getenv('DEFAULT_ADMIN_EMAIL', '')
DEFAULT_ADMIN_PASSWORD = os.getenv('DEFAULT_ADMIN_PASSWORD', '')

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '%(asctime)s %(levelname)s %(name)s %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django': {'handlers': ['console'], 'level': 'WARNING', 'propagate': False},
        'tracking': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'payouts': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False},
        'celery': {'handlers': ['console'], 'level': 'INFO', 'propagate': False},
    },
}
