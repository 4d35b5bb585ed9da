from django.apps import AppConfig


class PreciosConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'precios'
