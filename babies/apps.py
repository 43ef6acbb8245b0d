from django.apps import AppConfig


class BabiesConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "babies"
