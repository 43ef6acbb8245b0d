from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import CustomUser


@admin.register(CustomUser)
class CustomUserAdmin(UserAdmin):
    list_display = ["username", "email", "is_premium", "revenuecat_customer_id", "is_staff"]
    list_filter = ["is_premium", "is_staff", "is_active"]
    search_fields = ["username", "email", "revenuecat_customer_id"]
    fieldsets = UserAdmin.fieldsets + (
        ("Subscription", {"fields": ["revenuecat_customer_id", "is_premium"]}),
    )
