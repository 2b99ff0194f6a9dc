from django.contrib import admin
from .models import InventoryItem, InventoryTransaction


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ['party', 'paper_type_name', 'gsm', 'current_quantity', 'reserved_quantity', 'last_updated']
    list_filter = ['paper_type', 'gsm']
    search_fields = ['party__name', 'paper_type_name']
    readonly_fields = ['current_quantity', 'reserved_quantity', 'last_updated', 'created_at']


@admin.register(InventoryTransaction)
class InventoryTransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'inventory_item', 'transaction_type', 'quantity', 'unit_size', 'total_sheets', 'balance_after', 'is_deleted', 'created_at']
    list_filter = ['transaction_type', 'is_deleted', 'created_at']
    search_fields = ['party__name', 'description']
    readonly_fields = [f.name for f in InventoryTransaction._meta.fields]
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False
