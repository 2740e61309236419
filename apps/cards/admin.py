from django.contrib import admin
from .models import Card


@admin.register(Card)
class CardAdmin(admin.ModelAdmin):
    """Cards are edited here for descriptive fields only."""

    list_display = ['code', 'status', 'balance', 'franchisee', 'establishment', 'activated_at', 'used_at']
    list_filter = ['status', 'franchisee']
    search_fields = ['code', 'qr_code', 'customer_reference']
    raw_id_fields = ['franchisee', 'establishment']
    readonly_fields = ['balance', 'status', 'activated_at', 'used_at', 'created_at', 'updated_at']
