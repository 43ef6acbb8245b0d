from django.core.management.base import BaseCommand

from emails.bootstrap import sync_email_templates


class Command(BaseCommand):
    help = "Write the bundled confirmation and reset-password emails to the database"

    def handle(self, *args, **options):
        updated = sync_email_templates()
        if updated:
            self.stdout.write(
                self.style.SUCCESS(f"Updated email templates: {', '.join(updated)}")
            )
        else:
            self.stdout.write("Email templates already up to date")
