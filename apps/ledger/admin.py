from django.contrib import admin
from .models import Commission, Transaction


class ReadOnlyAdmin(admin.ModelAdmin):
    """Ledger rows only change through the ledger processor."""

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Transaction)
class TransactionAdmin(ReadOnlyAdmin):
    list_display = ['created_at', 'kind', 'amount', 'status', 'card', 'establishment', 'balance_after']
    list_filter = ['kind', 'status']
    search_fields = ['card__code', 'receipt', 'customer_name']
    date_hierarchy = 'created_at'


@admin.register(Commission)
class CommissionAdmin(ReadOnlyAdmin):
    list_display = ['created_at', 'amount', 'rate', 'status', 'franchisee', 'establishment']
    list_filter = ['status', 'franchisee']
    date_hierarchy = 'created_at'
