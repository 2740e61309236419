from django.contrib import admin
from .models import Display


@admin.register(Display)
class DisplayAdmin(admin.ModelAdmin):
    list_display = ['id', 'unit_type', 'status', 'franchisee', 'establishment', 'installed_at']
    list_filter = ['status', 'unit_type', 'franchisee']
    raw_id_fields = ['franchisee', 'establishment']
    readonly_fields = ['created_at', 'updated_at']
