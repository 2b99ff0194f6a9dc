from django.contrib import admin

from .models import QuotationNote, QuotationRequest


class QuotationNoteInline(admin.TabularInline):
    model = QuotationNote
    extra = 0
    readonly_fields = ['created_at']


@admin.register(QuotationRequest)
class QuotationRequestAdmin(admin.ModelAdmin):
    list_display = ['project_title', 'client_name', 'client_email', 'quantity', 'status', 'final_price',
                    'invoice_number', 'created_at']
    list_filter = ['status', 'print_type']
    search_fields = ['project_title', 'client_name', 'client_email', 'company_name', 'invoice_number']
    readonly_fields = ['id', 'created_at', 'updated_at']
    inlines = [QuotationNoteInline]
