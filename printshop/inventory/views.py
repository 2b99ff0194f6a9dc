import logging

from django.conf import settings
from django.db.models import Sum, Count
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError, NotFound
from rest_framework.permissions import IsAuthenticated

from printshop.core.permissions import is_admin_user
from printshop.core.responses import success_response, error_response
from printshop.core.utils import actor_name, create_audit_log
from . import services
from .filters import InventoryTransactionFilter
from .models import InventoryItem, InventoryTransaction
from .serializers import InventoryItemSerializer, InventoryTransactionSerializer, MovementCreateSerializer

logger = logging.getLogger(__name__)

TRANSACTION_LIST_LIMIT = 100
RECENT_TRANSACTIONS_LIMIT = 20
TOP_PARTIES_LIMIT = 5


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def inventory_list_create(request):
    """List stock items, record a movement, or delete (?id=&type=item|transaction)"""
    if request.method == 'GET':
        items = InventoryItem.objects.select_related('party', 'paper_type').order_by('-created_at')
        party_id = request.query_params.get('party_id')
        if party_id:
            if not party_id.isdigit():
                raise ValidationError('Invalid party ID')
            items = items.filter(party_id=party_id)
        return success_response(InventoryItemSerializer(items, many=True).data)

    elif request.method == 'POST':
        serializer = MovementCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        movement = services.record_movement(
            data['transaction_type'],
            data['quantity'],
            unit_size=data['unit_size'],
            unit_type=data['unit_type'],
            party_id=data['party_id'],
            paper_type_id=data.get('paper_type_id'),
            gsm=data.get('gsm'),
            description=data.get('description', ''),
            created_by=actor_name(request),
        )
        create_audit_log(request=request, action='stock_change', model_name='InventoryTransaction',
                         object_id=movement.id, object_name=str(movement.inventory_item),
                         changes={'transaction_type': movement.transaction_type,
                                  'total_sheets': movement.total_sheets,
                                  'balance_after': movement.balance_after})
        return success_response(InventoryTransactionSerializer(movement).data,
                                message='Inventory updated successfully', status=status.HTTP_201_CREATED)

    else:  # DELETE
        item_id = request.query_params.get('id')
        delete_type = request.query_params.get('type', 'item')
        if not item_id or not item_id.isdigit():
            raise ValidationError('Item ID is required')

        if delete_type == 'transaction':
            movement, item = services.soft_delete_movement(
                item_id, 'Deleted via inventory management', deleted_by=actor_name(request))
            create_audit_log(request=request, action='soft_delete', model_name='InventoryTransaction',
                             object_id=movement.id, changes={'reason': movement.deletion_reason})
            return success_response(None, message='Transaction deleted successfully')

        if not is_admin_user(request.user):
            return error_response('Admin access required', status=status.HTTP_403_FORBIDDEN)
        item = InventoryItem.objects.filter(pk=item_id).first()
        if item is None:
            raise NotFound('Inventory item not found')
        name = str(item)
        item.delete()
        create_audit_log(request=request, action='delete', model_name='InventoryItem', object_id=item_id, object_name=name)
        return success_response(None, message='Inventory item and all related transactions deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_transaction_list(request):
    """Stock movements, newest first"""
    queryset = InventoryTransaction.objects.select_related('party', 'inventory_item')
    filterset = InventoryTransactionFilter(request.query_params, queryset=queryset)
    if not filterset.is_valid():
        raise ValidationError(filterset.errors)
    movements = filterset.qs.order_by('-created_at', '-id')[:TRANSACTION_LIST_LIMIT]
    return success_response(InventoryTransactionSerializer(movements, many=True).data)


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def inventory_transaction_soft_delete(request, pk):
    """Soft delete a stock movement and recompute the item balance"""
    deleted_by = request.data.get('deleted_by') or actor_name(request)
    movement, item = services.soft_delete_movement(pk, request.data.get('deletion_reason'), deleted_by=deleted_by)
    create_audit_log(request=request, action='soft_delete', model_name='InventoryTransaction',
                     object_id=movement.id, changes={'reason': movement.deletion_reason})
    data = InventoryTransactionSerializer(movement).data
    data['current_quantity'] = item.current_quantity if item else None
    return success_response(data, message='Transaction deleted successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_dashboard(request):
    """Stock totals, low stock and debt lists, top parties and recent movements"""
    threshold = settings.LOW_STOCK_THRESHOLD
    items = InventoryItem.objects.select_related('party', 'paper_type')

    totals = items.aggregate(total_quantity=Sum('current_quantity'), total_items=Count('id'))
    low_stock = items.filter(current_quantity__gte=0, current_quantity__lt=threshold).order_by('current_quantity')
    debt = items.filter(current_quantity__lt=0).order_by('current_quantity')
    total_debt = debt.aggregate(total=Sum('current_quantity'))['total'] or 0

    top_parties = (
        items.order_by().values('party_id', 'party__name')
        .annotate(total_quantity=Sum('current_quantity'))
        .order_by('-total_quantity')[:TOP_PARTIES_LIMIT]
    )
    recent = (
        InventoryTransaction.objects.select_related('party', 'inventory_item')
        .filter(is_deleted=False).order_by('-created_at', '-id')[:RECENT_TRANSACTIONS_LIMIT]
    )

    return success_response({
        'stats': {
            'totalItems': totals['total_items'] or 0,
            'totalQuantity': totals['total_quantity'] or 0,
            'lowStockItems': low_stock.count(),
            'debtItems': debt.count(),
            'totalDebtQuantity': abs(total_debt),
            'parties': items.values('party_id').distinct().count(),
            'paperTypes': items.values('paper_type_id').distinct().count(),
        },
        'recentTransactions': InventoryTransactionSerializer(recent, many=True).data,
        'lowStockItems': InventoryItemSerializer(low_stock, many=True).data,
        'debtItems': InventoryItemSerializer(debt, many=True).data,
        'topParties': [
            {'party_id': row['party_id'], 'party_name': row['party__name'], 'total_quantity': row['total_quantity']}
            for row in top_parties
        ],
    })
