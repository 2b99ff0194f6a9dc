from django.urls import path
from .views import (
    inventory_list_create, inventory_transaction_list,
    inventory_transaction_soft_delete, inventory_dashboard,
)

urlpatterns = [
    path('inventory/', inventory_list_create, name='inventory-list-create'),
    path('inventory/transactions/', inventory_transaction_list, name='inventory-transaction-list'),
    path('inventory/transactions/<int:pk>/soft-delete/', inventory_transaction_soft_delete, name='inventory-transaction-soft-delete'),
    path('inventory/dashboard/', inventory_dashboard, name='inventory-dashboard'),
]
