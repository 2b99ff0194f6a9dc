"""
Paper stock movements.

`in`, `out` and `adjustment` move an item's current_quantity by the
movement's signed total_sheets; `reserved` and `released` move its
reserved_quantity instead. Soft deleted movements are ignored when the
balances are recomputed.
"""
import logging

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from printshop.core.exceptions import ConflictError
from printshop.jobsheets.models import PaperType
from printshop.parties.models import Party
from .models import InventoryItem, InventoryTransaction

logger = logging.getLogger(__name__)

MOVEMENT_TYPES = ('in', 'out', 'adjustment', 'reserved', 'released')
STOCK_TYPES = ('in', 'out', 'adjustment')


def signed_total_sheets(transaction_type, quantity, unit_size=1):
    """quantity * unit_size, negative for 'out' and positive for everything else"""
    sheets = abs(int(quantity) * int(unit_size))
    return -sheets if transaction_type == 'out' else sheets


def _positive_int(value, message):
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)
    if number <= 0:
        raise ValidationError(message)
    return number


def _get_or_create_item(party_id, paper_type_id, gsm):
    party = Party.objects.filter(pk=party_id).first()
    if party is None:
        raise NotFound('Party not found')
    paper_type = None
    if paper_type_id:
        paper_type = PaperType.objects.filter(pk=paper_type_id).first()
        if paper_type is None:
            raise NotFound('Paper type not found')

    item, created = InventoryItem.objects.get_or_create(
        party=party,
        paper_type=paper_type,
        gsm=gsm,
        defaults={'paper_type_name': paper_type.name if paper_type else 'Unknown'},
    )
    if created:
        logger.info(f"Created inventory item {item.id} for party {party.id} ({item.paper_type_name} {gsm})")
    return item


def record_movement(transaction_type, quantity, unit_size=1, unit_type='sheets', party_id=None,
                    paper_type_id=None, gsm=None, inventory_item=None, description='',
                    created_by='Admin', reference_job_sheet=None):
    """
    Record one stock movement and update the item's balances.

    Either pass `inventory_item` or the (party_id, paper_type_id, gsm) key;
    a missing item is created on first receipt.
    """
    if transaction_type not in MOVEMENT_TYPES:
        raise ValidationError('Invalid transaction type')
    quantity = _positive_int(quantity, 'Quantity must be a positive number')
    unit_size = _positive_int(unit_size or 1, 'Unit size must be a positive number')
    total_sheets = signed_total_sheets(transaction_type, quantity, unit_size)

    with transaction.atomic():
        if inventory_item is None:
            if not party_id:
                raise ValidationError('Party ID is required')
            inventory_item = _get_or_create_item(party_id, paper_type_id, gsm)
        item = InventoryItem.objects.select_for_update().get(pk=inventory_item.pk)

        if transaction_type in STOCK_TYPES:
            item.current_quantity += total_sheets
        elif transaction_type == 'reserved':
            item.reserved_quantity += total_sheets
        else:
            if total_sheets > item.reserved_quantity:
                raise ValidationError('Cannot release more sheets than are reserved')
            item.reserved_quantity -= total_sheets
        item.save(update_fields=['current_quantity', 'reserved_quantity', 'last_updated'])

        movement = InventoryTransaction.objects.create(
            inventory_item=item,
            party_id=item.party_id,
            paper_type_id=item.paper_type_id,
            gsm=item.gsm,
            transaction_type=transaction_type,
            quantity=quantity,
            unit_type=unit_type or 'sheets',
            unit_size=unit_size,
            total_sheets=total_sheets,
            description=description or '',
            reference_job_sheet=reference_job_sheet,
            balance_after=item.current_quantity,
            created_by=created_by or 'Admin',
        )

    logger.info(f"Inventory item {item.id}: {transaction_type} {total_sheets} sheets, balance {item.current_quantity}")
    return movement


def recompute_inventory_balance(item_id):
    """Rebuild current and reserved quantities from non-deleted movements"""
    with transaction.atomic():
        item = InventoryItem.objects.select_for_update().filter(pk=item_id).first()
        if item is None:
            raise NotFound('Inventory item not found')

        sums = {
            row['transaction_type']: row['total'] or 0
            for row in InventoryTransaction.objects.filter(inventory_item=item, is_deleted=False)
            .order_by().values('transaction_type').annotate(total=Sum('total_sheets'))
        }
        item.current_quantity = sum(sums.get(t, 0) for t in STOCK_TYPES)
        item.reserved_quantity = max(sums.get('reserved', 0) - sums.get('released', 0), 0)
        item.save(update_fields=['current_quantity', 'reserved_quantity', 'last_updated'])
    return item


def soft_delete_movement(movement_id, reason, deleted_by='Admin'):
    """
    Mark a movement deleted, then recompute the item's balances. A failed
    recompute is logged and leaves the movement deleted.
    """
    if not reason or not str(reason).strip():
        raise ValidationError('Deletion reason is required')

    with transaction.atomic():
        movement = InventoryTransaction.objects.select_for_update().filter(pk=movement_id).first()
        if movement is None:
            raise NotFound('Transaction not found')
        if movement.is_deleted:
            raise ConflictError('Transaction is already deleted')

        movement.is_deleted = True
        movement.deletion_reason = str(reason).strip()
        movement.deleted_by = deleted_by or 'Admin'
        movement.deleted_at = timezone.now()
        movement.save(update_fields=['is_deleted', 'deletion_reason', 'deleted_by', 'deleted_at'])

    item = None
    try:
        item = recompute_inventory_balance(movement.inventory_item_id)
    except Exception as e:
        logger.error(f"Error updating inventory balance for item {movement.inventory_item_id}: {str(e)}")
    return movement, item
