"""
Django settings for the print shop dashboard project.

All deployment specific values come from environment variables. A `.env`
file next to manage.py is loaded when present.
"""
import os
from datetime import timedelta
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent.parent

load_dotenv(BASE_DIR / '.env')


def env_bool(name, default=False):
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


def env_list(name, default=''):
    return [item.strip() for item in os.getenv(name, default).split(',') if item.strip()]


SECRET_KEY = os.getenv('DJANGO_SECRET_KEY', 'django-insecure-dev-only-key-change-me')

DEBUG = env_bool('DJANGO_DEBUG', False)

ALLOWED_HOSTS = env_list('DJANGO_ALLOWED_HOSTS', 'localhost,127.0.0.1,testserver')


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'django_filters',
    'printshop.core',
    'printshop.parties',
    'printshop.jobsheets',
    'printshop.inventory',
    'printshop.machines',
    'printshop.notifications',
    'printshop.quotations',
    'printshop.reports',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'printshop.config.urls'

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

WSGI_APPLICATION = 'printshop.config.wsgi.application'


# Database
# SQLite unless DB_ENGINE points at PostgreSQL (the production database)
DB_ENGINE = os.getenv('DB_ENGINE', 'sqlite')

if DB_ENGINE in ('postgres', 'postgresql'):
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DB_NAME', 'printshop'),
            'USER': os.getenv('DB_USER', 'postgres'),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'CONN_MAX_AGE': int(os.getenv('DB_CONN_MAX_AGE', '60')),
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': os.getenv('DB_NAME', str(BASE_DIR / 'db.sqlite3')),
        }
    }


# Cache
# Redis makes the login rate limiter shared between instances.
# Without it every process keeps its own counters.
REDIS_URL = os.getenv('REDIS_URL', '')

if REDIS_URL:
    CACHES = {
        'default': {
            'BACKEND': 'django_redis.cache.RedisCache',
            'LOCATION': REDIS_URL,
            'OPTIONS': {
                'CLIENT_CLASS': 'django_redis.client.DefaultClient',
            },
            'KEY_PREFIX': 'printshop',
        }
    }
else:
    CACHES = {
        'default': {
            'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
            'LOCATION': 'printshop-default',
        }
    }


AUTH_USER_MODEL = 'core.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]


LANGUAGE_CODE = 'en-us'
TIME_ZONE = os.getenv('TIME_ZONE', 'Asia/Kolkata')
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = 'media/'
MEDIA_ROOT = BASE_DIR / 'media'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'printshop.core.authentication.AdminCookieAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'EXCEPTION_HANDLER': 'printshop.core.exceptions.api_exception_handler',
    'TEST_REQUEST_DEFAULT_FORMAT': 'json',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(hours=int(os.getenv('JWT_ACCESS_HOURS', '12'))),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=int(os.getenv('JWT_REFRESH_DAYS', '7'))),
    'AUTH_HEADER_TYPES': ('Bearer',),
}


# Dashboard admin cookie (issued by auth/admin-login/)
ADMIN_PASSCODE = os.getenv('ADMIN_PASSCODE', '')
ADMIN_USERNAME = os.getenv('ADMIN_USERNAME', 'admin')
ADMIN_COOKIE_NAME = 'admin-auth'
ADMIN_COOKIE_SALT = 'printshop.admin-auth'
ADMIN_COOKIE_MAX_AGE = 60 * 60 * 3

# Shared secrets for machine-to-machine endpoints
CRON_SECRET = os.getenv('CRON_SECRET', '')
EMAIL_WORKER_TOKEN = os.getenv('EMAIL_WORKER_TOKEN', '')
SETUP_SECRET = os.getenv('SETUP_SECRET', '')

# Operator accounts bootstrapped by auth/setup-users/ and `manage.py setup_operators`
OPERATOR_DEFAULT_PASSWORD = os.getenv('OPERATOR_DEFAULT_PASSWORD', '')
OPERATOR_ACCOUNTS = [
    {'username': 'admin', 'email': 'admin@ganpathioverseas.com', 'role': 'admin', 'name': 'Administrator'},
    {'username': 'supervisor', 'email': 'supervisor@ganpathioverseas.com', 'role': 'supervisor', 'name': 'Supervisor'},
    {'username': 'guddu', 'email': 'guddu@ganpathioverseas.com', 'role': 'operator', 'name': 'Guddu'},
    {'username': 'dwarika', 'email': 'dwarika@ganpathioverseas.com', 'role': 'operator', 'name': 'Dwarika'},
]

# Rate limiting for login style endpoints
LOGIN_RATE_LIMIT_ATTEMPTS = int(os.getenv('LOGIN_RATE_LIMIT_ATTEMPTS', '5'))
LOGIN_RATE_LIMIT_WINDOW = int(os.getenv('LOGIN_RATE_LIMIT_WINDOW', str(15 * 60)))
QUOTATION_RATE_LIMIT_ATTEMPTS = int(os.getenv('QUOTATION_RATE_LIMIT_ATTEMPTS', '10'))

# Outbound mail API used by the email worker
MAIL_API_URL = os.getenv('MAIL_API_URL', '')
MAIL_API_KEY = os.getenv('MAIL_API_KEY', '')
MAIL_FROM = os.getenv('MAIL_FROM', 'portal@ganpathioverseas.com')
MAIL_API_TIMEOUT = int(os.getenv('MAIL_API_TIMEOUT', '15'))
EMAIL_WORKER_BATCH_SIZE = int(os.getenv('EMAIL_WORKER_BATCH_SIZE', '10'))
EMAIL_WORKER_DELAY_SECONDS = float(os.getenv('EMAIL_WORKER_DELAY_SECONDS', '0.1'))
# Claimed emails not finished within this window go back to the queue
EMAIL_WORKER_CLAIM_TIMEOUT_SECONDS = int(os.getenv('EMAIL_WORKER_CLAIM_TIMEOUT_SECONDS', '600'))

# Inventory
LOW_STOCK_THRESHOLD = int(os.getenv('LOW_STOCK_THRESHOLD', '1000'))


LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} [{levelname}] {name}: {message}',
            'style': '{',
        },
        'simple': {
            'format': '[{levelname}] {message}',
            'style': '{',
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
        'django': {
            'handlers': ['console'],
            'level': os.getenv('DJANGO_LOG_LEVEL', 'WARNING'),
            'propagate': False,
        },
        'printshop': {
            'handlers': ['console'],
            'level': 'DEBUG' if DEBUG else LOG_LEVEL,
            'propagate': False,
        },
    },
}
