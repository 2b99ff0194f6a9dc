from django.urls import path

from . import views

urlpatterns = [
    path('quotations/', views.quotation_list_create, name='quotation-list-create'),
    path('quotations/<uuid:pk>/', views.quotation_detail, name='quotation-detail'),
    path('quotations/<uuid:pk>/notes/', views.quotation_notes, name='quotation-notes'),
    path('quotations/<uuid:pk>/invoice/', views.quotation_invoice, name='quotation-invoice'),
]
