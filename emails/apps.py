from django.apps import AppConfig
from django.db.models.signals import post_migrate


def sync_templates_after_migrate(sender, **kwargs):
    from .bootstrap import sync_email_templates

    sync_email_templates()


class EmailsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "emails"

    def ready(self):
        post_migrate.connect(
            sync_templates_after_migrate,
            sender=self,
            dispatch_uid="emails.sync_templates_after_migrate",
        )
