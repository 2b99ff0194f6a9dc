from django.contrib import admin

from .models import Machine


@admin.register(Machine)
class MachineAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'color_capacity', 'status', 'operator_name', 'is_available']
    list_filter = ['type', 'status', 'is_available']
    search_fields = ['name', 'operator_name', 'operator_email']
