"""
Test settings.

SQLite en memoria como destino; el origen se reemplaza por fakes en los tests.
"""

from .base import *  # noqa

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

DATA_MIGRATION = {
    **DATA_MIGRATION,
    'SOURCE_DATABASE_URL': '',
    'CHILD_FETCH_WORKERS': 1,
}

# Minimal logging for tests
LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'handlers': {
        'null': {
            'class': 'logging.NullHandler',
        },
    },
    'root': {
        'handlers': ['null'],
        'level': 'WARNING',
    },
}
