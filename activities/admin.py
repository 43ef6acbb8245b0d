from django.contrib import admin

from .models import BabyActivity


@admin.register(BabyActivity)
class BabyActivityAdmin(admin.ModelAdmin):
    list_display = ["local_id", "type", "baby_profile", "user", "timestamp", "deleted_at", "updated_at"]
    list_filter = ["type", "timestamp"]
    search_fields = ["local_id", "document_id", "baby_profile__name", "user__email"]
    readonly_fields = ["document_id", "synced_at", "created_at", "updated_at"]
    date_hierarchy = "timestamp"
