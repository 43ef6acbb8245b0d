from django.db import models


class AuthEmailTemplate(models.Model):
    """Stored email used by the authentication flows.

    `message` and `subject` are Django template strings rendered at send time
    with `user`, `url` and `token` in the context.

    Attributes:
        kind (CharField): email_confirmation or reset_password
        from_email (CharField): Sender address
        response_email (CharField): Reply-To address
        subject (CharField): Subject line template
        message (TextField): HTML body template
        updated_at (DateTimeField): When the template was last written
    """

    class Kind(models.TextChoices):
        EMAIL_CONFIRMATION = "email_confirmation", "Email confirmation"
        RESET_PASSWORD = "reset_password", "Reset password"

    kind = models.CharField(max_length=32, choices=Kind.choices, unique=True)
    from_email = models.CharField(max_length=254, blank=True)
    response_email = models.CharField(max_length=254, blank=True)
    subject = models.CharField(max_length=255, blank=True)
    message = models.TextField(blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["kind"]

    def __str__(self):
        return self.get_kind_display()
