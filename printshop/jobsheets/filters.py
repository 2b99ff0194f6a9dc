import django_filters
from django.db.models import Q

from .models import JobSheet


class JobSheetFilter(django_filters.FilterSet):
    party_id = django_filters.NumberFilter(field_name='party_id')
    machine_id = django_filters.NumberFilter(field_name='machine_id')
    job_status = django_filters.ChoiceFilter(choices=JobSheet.JOB_STATUS_CHOICES)
    search = django_filters.CharFilter(method='filter_search')
    include_deleted = django_filters.BooleanFilter(method='filter_include_deleted')
    date_from = django_filters.DateFilter(field_name='job_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='job_date', lookup_expr='lte')

    class Meta:
        model = JobSheet
        fields = ['party_id', 'machine_id', 'job_status', 'search', 'include_deleted', 'date_from', 'date_to']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        query = Q(party_name__icontains=value) | Q(party__name__icontains=value) | Q(description__icontains=value)
        if value.isdigit():
            query |= Q(id=int(value))
        return queryset.filter(query)

    def filter_include_deleted(self, queryset, name, value):
        return queryset

    def filter_queryset(self, queryset):
        if not self.form.cleaned_data.get('include_deleted'):
            queryset = queryset.filter(is_deleted=False)
        return super().filter_queryset(queryset)
