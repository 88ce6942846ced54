from django.apps import AppConfig


class BoutiquesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "modules.boutiques"
    label = "boutiques"
