import django_filters
from django.db.models import Q
from .models import Party, PartyTransaction


class PartyFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = Party
        fields = ['search']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(phone__icontains=value))


class PartyTransactionFilter(django_filters.FilterSet):
    party_id = django_filters.NumberFilter(field_name='party_id')
    type = django_filters.ChoiceFilter(choices=PartyTransaction.TYPE_CHOICES)
    include_deleted = django_filters.BooleanFilter(method='filter_include_deleted')
    date_from = django_filters.DateFilter(field_name='created_at', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='created_at', lookup_expr='date__lte')

    class Meta:
        model = PartyTransaction
        fields = ['party_id', 'type', 'include_deleted', 'date_from', 'date_to']

    def filter_include_deleted(self, queryset, name, value):
        # Applied in filter_queryset so the default also covers a missing param
        return queryset

    def filter_queryset(self, queryset):
        # Deleted rows are hidden unless include_deleted=true is passed
        if not self.form.cleaned_data.get('include_deleted'):
            queryset = queryset.filter(is_deleted=False)
        return super().filter_queryset(queryset)
