from django.contrib import admin

from .models import BabyProfile


@admin.register(BabyProfile)
class BabyProfileAdmin(admin.ModelAdmin):
    list_display = ["name", "user", "birthdate", "is_premature", "created_at"]
    list_filter = ["is_premature", "created_at"]
    search_fields = ["name", "user__email", "document_id"]
    readonly_fields = ["document_id", "created_at", "updated_at"]
    date_hierarchy = "birthdate"
