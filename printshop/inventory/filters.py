import django_filters
from .models import InventoryTransaction


class InventoryTransactionFilter(django_filters.FilterSet):
    party_id = django_filters.NumberFilter(field_name='party_id')
    inventory_item_id = django_filters.NumberFilter(field_name='inventory_item_id')
    transaction_type = django_filters.ChoiceFilter(choices=InventoryTransaction.TRANSACTION_TYPE_CHOICES)
    include_deleted = django_filters.BooleanFilter(method='filter_include_deleted')

    class Meta:
        model = InventoryTransaction
        fields = ['party_id', 'inventory_item_id', 'transaction_type', 'include_deleted']

    def filter_include_deleted(self, queryset, name, value):
        return queryset

    def filter_queryset(self, queryset):
        if not self.form.cleaned_data.get('include_deleted'):
            queryset = queryset.filter(is_deleted=False)
        return super().filter_queryset(queryset)
