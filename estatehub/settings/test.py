"""
Test settings.
In-memory database, storage and channel layer; Celery runs inline.
"""
from .base import *  # noqa

SECRET_KEY = 'django-insecure-estatehub-test'

DEBUG = False

ALLOWED_HOSTS = ['testserver', 'localhost']

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

STORAGES['default'] = {
    'BACKEND': 'django.core.files.storage.InMemoryStorage',
}

PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'

CELERY_TASK_ALWAYS_EAGER = True
CELERY_TASK_EAGER_PROPAGATES = True
CELERY_BROKER_URL = 'memory://'
CELERY_RESULT_BACKEND = 'cache+memory://'

CACHES['default']['LOCATION'] = 'estatehub-test-cache'
CACHES['display_names']['LOCATION'] = 'estatehub-test-display-names'

LOGGING['loggers']['common']['level'] = 'ERROR'
LOGGING['loggers']['notifications']['level'] = 'ERROR'
LOGGING['loggers']['estatehub']['level'] = 'ERROR'
