from django.contrib import admin

from .models import AuthEmailTemplate


@admin.register(AuthEmailTemplate)
class AuthEmailTemplateAdmin(admin.ModelAdmin):
    list_display = ["kind", "subject", "from_email", "response_email", "updated_at"]
    readonly_fields = ["updated_at"]
