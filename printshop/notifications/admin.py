from django.contrib import admin

from .models import EmailNotification, OperatorNotification


@admin.register(OperatorNotification)
class OperatorNotificationAdmin(admin.ModelAdmin):
    list_display = ['title', 'machine', 'job_sheet', 'type', 'read', 'created_at']
    list_filter = ['type', 'read', 'machine']
    search_fields = ['title', 'message']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(EmailNotification)
class EmailNotificationAdmin(admin.ModelAdmin):
    list_display = ['subject', 'to_email', 'status', 'attempts', 'sent_at', 'created_at']
    list_filter = ['status']
    search_fields = ['to_email', 'subject']
    readonly_fields = ['created_at', 'sent_at', 'attempts']
