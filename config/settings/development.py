"""
Development settings for the store data migration project.

These settings are suitable for local development environment.
"""

from .base import *  # noqa
from decouple import config

DEBUG = True

# Local MySQL destination when DATABASE_URL is not exported
if not DATABASES['default']:
    DATABASES['default'] = database_from_url(
        config('DEV_DATABASE_URL', default='mysql://root@127.0.0.1:3306/store')
    )

LOGGING['loggers']['apps']['level'] = 'DEBUG'
LOGGING['handlers']['console']['level'] = 'DEBUG'
