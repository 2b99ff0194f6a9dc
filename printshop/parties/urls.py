from django.urls import path
from .views import (
    party_list_create, party_detail, party_ledger,
    party_transaction_list_create, transaction_detail, transaction_soft_delete,
)

urlpatterns = [
    # Party endpoints
    path('parties/', party_list_create, name='party-list-create'),
    path('parties/transactions/', party_transaction_list_create, name='party-transaction-list-create'),
    path('parties/<int:pk>/', party_detail, name='party-detail'),
    path('parties/<int:pk>/ledger/', party_ledger, name='party-ledger'),

    # Transaction endpoints
    path('transactions/<int:pk>/', transaction_detail, name='transaction-detail'),
    path('transactions/<int:pk>/soft-delete/', transaction_soft_delete, name='transaction-soft-delete'),
]
