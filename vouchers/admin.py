from django.contrib import admin

from .models import Voucher


@admin.register(Voucher)
class VoucherAdmin(admin.ModelAdmin):
    list_display = ["code", "type", "duration_months", "is_used", "current_uses", "max_uses", "expiry_date"]
    list_filter = ["type", "is_used", "expiry_date"]
    search_fields = ["code", "assigned_to__email", "assigned_to__revenuecat_customer_id"]
    readonly_fields = ["redeemed_at", "current_uses", "created_at"]
    autocomplete_fields = ["assigned_to"]
