from django.urls import path

from . import views

urlpatterns = [
    path('machines/', views.machine_list_create, name='machine-list-create'),
    path('machines/assign-job/', views.assign_job, name='machine-assign-job'),
    path('machines/<int:pk>/operator/', views.machine_operator, name='machine-operator'),
    path('jobs/', views.operator_jobs, name='operator-jobs'),
    path('workflow/', views.workflow_overview, name='workflow-overview'),
]
