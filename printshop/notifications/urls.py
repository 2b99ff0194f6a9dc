from django.urls import path

from . import views

urlpatterns = [
    path('notifications/', views.notification_list, name='notification-list'),
    path('email-worker/', views.email_worker, name='email-worker'),
]
