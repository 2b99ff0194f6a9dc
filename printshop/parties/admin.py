from django.contrib import admin
from .models import Party, PartyTransaction


@admin.register(Party)
class PartyAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'email', 'balance', 'credit_limit', 'total_orders', 'total_payments', 'created_at']
    search_fields = ['name', 'phone', 'email']
    ordering = ['name']
    # Balance and totals only move through the ledger
    readonly_fields = ['balance', 'total_orders', 'total_payments', 'created_at', 'updated_at']


@admin.register(PartyTransaction)
class PartyTransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'party', 'type', 'amount', 'balance_after', 'job_sheet', 'created_by', 'is_deleted', 'created_at']
    list_filter = ['type', 'is_deleted', 'created_at']
    search_fields = ['party__name', 'party__phone', 'description']
    readonly_fields = [f.name for f in PartyTransaction._meta.fields]
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False
