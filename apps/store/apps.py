"""App configuration for store."""

from django.apps import AppConfig


class StoreConfig(AppConfig):
    """Destination schema of the store (tables owned by the web application)."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.store'
    verbose_name = 'Store'
