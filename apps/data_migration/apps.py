"""App configuration for data_migration."""

from django.apps import AppConfig


class DataMigrationConfig(AppConfig):
    """Configuration for the store data migration app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.data_migration'
    verbose_name = 'Store Data Migration'
