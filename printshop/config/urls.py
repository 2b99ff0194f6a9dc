"""
URL configuration for the print shop dashboard.

Every app mounts its JSON endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "Print Shop Management Admin Panel"
admin.site.site_title = "Print Shop Admin Portal"
admin.site.index_title = "Welcome to the Print Shop Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('printshop.core.urls')),
    path('api/v1/', include('printshop.parties.urls')),
    path('api/v1/', include('printshop.jobsheets.urls')),
    path('api/v1/', include('printshop.inventory.urls')),
    path('api/v1/', include('printshop.machines.urls')),
    path('api/v1/', include('printshop.notifications.urls')),
    path('api/v1/', include('printshop.quotations.urls')),
    path('api/v1/', include('printshop.reports.urls')),
]
