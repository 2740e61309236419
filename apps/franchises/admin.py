from django.contrib import admin
from .models import Establishment, Franchisee, Franchisor


@admin.register(Franchisor)
class FranchisorAdmin(admin.ModelAdmin):
    list_display = ['name', 'cnpj', 'email', 'created_at']
    search_fields = ['name', 'cnpj']


@admin.register(Franchisee)
class FranchiseeAdmin(admin.ModelAdmin):
    list_display = ['name', 'region', 'commission_rate', 'status', 'external_linkage', 'created_at']
    list_filter = ['status', 'external_linkage', 'region']
    search_fields = ['name', 'cnpj', 'email']
    readonly_fields = ['external_linkage', 'external_customer_id', 'external_link_error', 'created_at', 'updated_at']


@admin.register(Establishment)
class EstablishmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'franchisee', 'category', 'status', 'external_linkage', 'created_at']
    list_filter = ['status', 'external_linkage', 'franchisee']
    search_fields = ['name', 'cnpj', 'email']
    raw_id_fields = ['franchisee']
    readonly_fields = ['external_linkage', 'external_customer_id', 'external_link_error', 'created_at', 'updated_at']
