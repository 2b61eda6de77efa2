# quikprint/core/apps.py

from django.apps import AppConfig


class CoreConfig(AppConfig):
    name = 'quikprint.core'
    label = 'core'
    verbose_name = 'Business rules (Core)'

    # No models here: persistence lives in the Infrastructure layer
    default_auto_field = 'django.db.models.BigAutoField'
