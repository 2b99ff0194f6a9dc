from django.urls import path

from . import views

urlpatterns = [
    path('job-sheets/', views.job_sheet_list_create, name='job-sheet-list-create'),
    path('job-sheets/<int:pk>/', views.job_sheet_detail, name='job-sheet-detail'),
    path('job-sheets/<int:pk>/soft-delete/', views.job_sheet_soft_delete, name='job-sheet-soft-delete'),
    path('job-sheets/<int:pk>/report/', views.job_sheet_report, name='job-sheet-report'),
    path('job-sheet-notes/', views.job_sheet_notes, name='job-sheet-notes'),
    path('paper-types/', views.paper_types, name='paper-types'),
]
