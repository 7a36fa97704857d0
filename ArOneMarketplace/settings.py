"""
Django settings for the AR ONE Gifts & Crafts marketplace.

Values are read from the environment; defaults suit local development
and the test suite.
"""

import os
from decimal import Decimal
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    return os.getenv(name, str(default)).lower() in ('1', 'true', 'yes')


SECRET_KEY = os.getenv('SECRET_KEY', 'django-insecure-dev-key-change-me')
DEBUG = env_bool('DEBUG', True)
ALLOWED_HOSTS = [h.strip() for h in os.getenv('ALLOWED_HOSTS', 'localhost,127.0.0.1').split(',') if h.strip()]

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'django.contrib.sites',

    # Third party
    'allauth',
    'allauth.account',
    'allauth.socialaccount',

    # Local apps
    'apps.users',
    'apps.vendors',
    'apps.orders',
    'apps.reviews',
    'apps.notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'allauth.account.middleware.AccountMiddleware',
]

ROOT_URLCONF = 'ArOneMarketplace.urls'

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

WSGI_APPLICATION = 'ArOneMarketplace.wsgi.application'

# ==========================================
# DATABASE
# ==========================================

if os.getenv('DB_ENGINE', 'sqlite') == 'postgres':
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.postgresql',
            'NAME': os.getenv('DB_NAME', 'arone'),
            'USER': os.getenv('DB_USER', 'arone'),
            'PASSWORD': os.getenv('DB_PASSWORD', ''),
            'HOST': os.getenv('DB_HOST', 'localhost'),
            'PORT': os.getenv('DB_PORT', '5432'),
            'ATOMIC_REQUESTS': False,
        }
    }
else:
    DATABASES = {
        'default': {
            'ENGINE': 'django.db.backends.sqlite3',
            'NAME': BASE_DIR / os.getenv('DB_NAME', 'db.sqlite3'),
        }
    }

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# ==========================================
# AUTH
# ==========================================

AUTH_USER_MODEL = 'users.CustomUser'

AUTHENTICATION_BACKENDS = [
    'django.contrib.auth.backends.ModelBackend',
    'allauth.account.auth_backends.AuthenticationBackend',
]

SITE_ID = 1

ACCOUNT_LOGIN_METHODS = {'email'}
ACCOUNT_SIGNUP_FIELDS = ['email*', 'password1*', 'password2*']
ACCOUNT_USER_MODEL_USERNAME_FIELD = None

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Asia/Colombo'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = 'media/'
MEDIA_ROOT = BASE_DIR / 'media'

# ==========================================
# EMAIL
# ==========================================

EMAIL_BACKEND = os.getenv('EMAIL_BACKEND', 'django.core.mail.backends.console.EmailBackend')
EMAIL_HOST = os.getenv('EMAIL_HOST', 'localhost')
EMAIL_PORT = int(os.getenv('EMAIL_PORT', 587))
EMAIL_HOST_USER = os.getenv('EMAIL_HOST_USER', '')
EMAIL_HOST_PASSWORD = os.getenv('EMAIL_HOST_PASSWORD', '')
EMAIL_USE_TLS = env_bool('EMAIL_USE_TLS', True)
DEFAULT_FROM_EMAIL = os.getenv('DEFAULT_FROM_EMAIL', 'noreply@aronegifts.lk')
ADMIN_EMAILS = [e.strip() for e in os.getenv('ADMIN_EMAILS', 'admin@aronegifts.lk').split(',') if e.strip()]

# ==========================================
# MARKETPLACE
# ==========================================

SITE_NAME = os.getenv('SITE_NAME', 'AR ONE Gifts & Crafts')
SITE_URL = os.getenv('SITE_URL', 'http://localhost:8000')
CURRENCY_SYMBOL = os.getenv('CURRENCY_SYMBOL', 'Rs.')

# Platform commission percentage applied when a wallet has no explicit rate
DEFAULT_COMMISSION_RATE = Decimal(os.getenv('DEFAULT_COMMISSION_RATE', '10'))
PAYOUT_MINIMUM_AMOUNT = Decimal(os.getenv('PAYOUT_MINIMUM_AMOUNT', '0'))

ORDER_CODE_PREFIX = os.getenv('ORDER_CODE_PREFIX', 'AR')
ORDER_CODE_MAX_ATTEMPTS = int(os.getenv('ORDER_CODE_MAX_ATTEMPTS', 3))

# When True, an order whose sub-orders are all delivered is marked delivered
ORDER_STATUS_ROLLUP = env_bool('ORDER_STATUS_ROLLUP', False)

VENDOR_REGISTRATION_TIMEOUT = float(os.getenv('VENDOR_REGISTRATION_TIMEOUT', 20))

REVIEW_DENYLIST = [
    'bad', 'poor', 'worst', 'fake', 'scam', 'terrible', 'horrible', 'waste', 'cheat', 'broken',
    'stupid', 'idiot', 'useless', 'garbage', 'f***', 's***', 'bitch', 'ass',
]

USE_MOCK_NOTIFICATIONS = env_bool('USE_MOCK_NOTIFICATIONS', True)

# ==========================================
# LOGGING
# ==========================================

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '{asctime} {levelname} {name}: {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'apps': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
        },
        'core': {
            'handlers': ['console'],
            'level': os.getenv('LOG_LEVEL', 'INFO'),
        },
    },
}
