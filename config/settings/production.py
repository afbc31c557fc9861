"""
Production settings for the store data migration project.

Destino MySQL desde DB_* (o DATABASE_URL), origen desde SOURCE_DATABASE_URL.
"""

from .base import *  # noqa
from decouple import config

DEBUG = False
SECRET_KEY = config('SECRET_KEY')

# Production destination - MySQL
if not DATABASES['default']:
    DATABASES['default'] = {
        'ENGINE': 'django.db.backends.mysql',
        'NAME': config('DB_NAME'),
        'USER': config('DB_USER'),
        'PASSWORD': config('DB_PASSWORD'),
        'HOST': config('DB_HOST'),
        'PORT': config('DB_PORT', default='3306'),
        'CONN_MAX_AGE': 0,
        'OPTIONS': {'charset': 'utf8mb4'},
    }

LOGGING['formatters']['verbose'] = {
    'format': '{levelname} {asctime} {module} {process:d} {thread:d} {message}',
    'style': '{',
}
LOGGING['handlers']['console']['formatter'] = 'verbose'
