from django.contrib import admin
from .models import CardRequest


@admin.register(CardRequest)
class CardRequestAdmin(admin.ModelAdmin):
    list_display = ['establishment', 'franchisee', 'quantity', 'status', 'created_at', 'delivered_at']
    list_filter = ['status', 'franchisee']
    search_fields = ['establishment__name', 'notes']
    raw_id_fields = ['establishment', 'franchisee', 'requested_by']
    readonly_fields = ['created_at', 'updated_at']
