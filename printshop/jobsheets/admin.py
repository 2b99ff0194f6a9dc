from django.contrib import admin

from .models import JobSheet, JobSheetNote, PaperType


class JobSheetNoteInline(admin.TabularInline):
    model = JobSheetNote
    extra = 0
    readonly_fields = ['created_at']


@admin.register(JobSheet)
class JobSheetAdmin(admin.ModelAdmin):
    list_display = ['id', 'job_date', 'party_name', 'description', 'machine', 'job_status', 'is_deleted']
    list_filter = ['job_status', 'is_deleted', 'machine', 'job_date']
    search_fields = ['party_name', 'description']
    readonly_fields = ['party_balance_before', 'party_balance_after', 'assigned_at', 'started_at',
                       'completed_at', 'deleted_at', 'created_at', 'updated_at']
    inlines = [JobSheetNoteInline]


@admin.register(PaperType)
class PaperTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'gsm', 'created_at']
    search_fields = ['name']
