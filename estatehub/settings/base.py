"""
Base settings shared by all environments.
Import this module in dev.py/prod.py/test.py and override environment-specific values.
"""
from pathlib import Path
import os

# Paths
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# Core Django settings
INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'common',
    'accounts.apps.AccountsConfig',
    'notifications.apps.NotificationsConfig',
    'chat',
    'properties',
    'contracting',
    'marketplace',
    'payments',
    'reviews',
    'support',
    'adminpanel',
]

MIDDLEWARE = [
    'estatehub.middleware.RequestIDMiddleware',
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'estatehub.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [BASE_DIR / 'templates'],
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

WSGI_APPLICATION = 'estatehub.wsgi.application'
ASGI_APPLICATION = 'estatehub.asgi.application'

# Channels (in-memory by default)
CHANNEL_LAYERS = {
    'default': {
        'BACKEND': 'channels.layers.InMemoryChannelLayer',
    },
}

# Internationalization
LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'Asia/Karachi'
USE_I18N = True
USE_TZ = True

# Static & media
STATIC_URL = 'static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'
MEDIA_URL = '/media/'
MEDIA_ROOT = BASE_DIR / 'media'
STORAGES = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}

# Auth & defaults
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'
AUTH_USER_MODEL = 'accounts.User'

# Caches: display names live in their own bounded LRU cache
CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'estatehub-cache',
    },
    'display_names': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'estatehub-display-names',
        'TIMEOUT': 60 * 60,
        'OPTIONS': {
            'MAX_ENTRIES': int(os.environ.get('DISPLAY_NAME_CACHE_SIZE', '2048')),
            'CULL_FREQUENCY': 4,
        },
    },
}

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'EXCEPTION_HANDLER': 'common.views.service_exception_handler',
}

# Logging (baseline)
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'simple': {
            'format': '%(asctime)s %(levelname)s %(name)s: %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'simple',
        },
    },
    'loggers': {
        'estatehub': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': True,
        },
        'common': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': True,
        },
        'notifications': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': True,
        },
        'django': {
            'handlers': ['console'],
            'level': 'WARNING',
            'propagate': True,
        },
    },
    'root': {
        'handlers': ['console'],
        'level': 'WARNING',
    },
}

# Celery configuration (defaults suitable for local dev; override via env)
CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL', 'redis://localhost:6379/0')
CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND', 'redis://localhost:6379/0')
CELERY_TASK_ROUTES = {
    'notifications.tasks.send_notification_email': {'queue': 'notifications'},
    'notifications.tasks.deliver_broadcast': {'queue': 'notifications'},
}
CELERY_TASK_DEFAULT_QUEUE = 'default'

DEFAULT_FROM_EMAIL = os.environ.get('DEFAULT_FROM_EMAIL', 'no-reply@estatehub.local')

# Domain tunables
# Write-batch ceiling for bulk notification fan-out
NOTIFICATION_BATCH_SIZE = 500
# Recipient count above which a broadcast waits for operator confirmation
BROADCAST_CONFIRMATION_THRESHOLD = 500
DEFAULT_CURRENCY = os.environ.get('DEFAULT_CURRENCY', 'PKR')
REVIEW_MIN_COMMENT_LENGTH = 10
MARKETPLACE_IMAGE_ROOT = 'marketplace'
PROPERTY_IMAGE_ROOT = 'properties'
# Per listing or property
MAX_IMAGES_PER_ITEM = 10
