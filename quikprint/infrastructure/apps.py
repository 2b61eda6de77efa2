from django.apps import AppConfig


class InfrastructureConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'quikprint.infrastructure'
    label = 'infrastructure'
    verbose_name = 'Accounts and integrations'
