"""
Job sheet lifecycle.

Creating a sheet for a party bills its total cost to the party ledger as an
`order`; paper taken from the party's stock is recorded as an inventory
`out` movement. Deleting the sheet (soft or hard) undoes both.
"""
import logging

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from printshop.core.exceptions import ConflictError
from printshop.inventory import services as inventory_services
from printshop.inventory.models import InventoryTransaction
from printshop.parties import ledger
from printshop.parties.models import Party, PartyTransaction
from .models import JobSheet

logger = logging.getLogger(__name__)

BILLING_FIELDS = ('party', 'printing', 'uv', 'baking', 'used_from_inventory', 'inventory_item', 'paper_sheet')


def _label(sheet):
    return f"Job Sheet #{sheet.id}: {sheet.description or 'Job order'}"


def _lock_sheet(sheet_id):
    sheet = JobSheet.objects.select_for_update().filter(pk=sheet_id).first()
    if sheet is None:
        raise NotFound('Job sheet not found')
    return sheet


def create_job_sheet(data, created_by='Admin'):
    """
    Insert a job sheet from validated data, bill the party and take the
    paper out of stock in one database transaction.
    """
    with transaction.atomic():
        sheet = JobSheet(**data)
        if sheet.party is not None and not sheet.party_name:
            sheet.party_name = sheet.party.name
        sheet.save()

        if sheet.used_from_inventory and sheet.inventory_item_id and sheet.paper_sheet > 0:
            inventory_services.record_movement(
                'out',
                sheet.paper_sheet,
                unit_size=1,
                unit_type='sheets',
                inventory_item=sheet.inventory_item,
                description=f"Used for {_label(sheet)}",
                created_by='Job Sheet',
                reference_job_sheet=sheet,
            )

        total_cost = sheet.total_cost
        if sheet.party_id and total_cost > 0:
            sheet.party_balance_before = Party.objects.get(pk=sheet.party_id).balance
            txn = ledger.post_transaction(
                sheet.party_id,
                'order',
                total_cost,
                description=_label(sheet),
                created_by=created_by,
                job_sheet=sheet,
            )
            sheet.party_balance_after = txn.balance_after
            sheet.save(update_fields=['party_balance_before', 'party_balance_after', 'updated_at'])

    logger.info(f"Created job sheet {sheet.id} for party {sheet.party_id} (cost {sheet.total_cost})")
    return sheet


def _is_billed(sheet):
    return (sheet.party_transactions.filter(is_deleted=False).exists()
            or sheet.inventory_transactions.filter(is_deleted=False).exists())


def update_job_sheet(sheet, data):
    """Apply validated edits. Billing fields are frozen once the sheet has ledger or stock entries."""
    changed_billing = [
        field for field in BILLING_FIELDS
        if field in data and data[field] != getattr(sheet, field)
    ]
    if changed_billing and _is_billed(sheet):
        raise ValidationError('Cannot edit cost, party or paper usage of a billed job sheet')

    for field, value in data.items():
        setattr(sheet, field, value)
    if 'party' in data and data['party'] is not None and not data.get('party_name'):
        sheet.party_name = data['party'].name
    sheet.save()
    return sheet


def soft_delete_job_sheet(sheet_id, reason, deleted_by='Admin'):
    """
    Mark a job sheet deleted and soft delete its ledger and stock entries,
    reversing the party balance and recomputing stock.
    """
    if not reason or not str(reason).strip():
        raise ValidationError('Deletion reason is required')
    reason = str(reason).strip()
    deleted_by = deleted_by or 'Admin'

    with transaction.atomic():
        sheet = _lock_sheet(sheet_id)
        if sheet.is_deleted:
            raise ConflictError('Job sheet is already marked as deleted')

        for txn_id in sheet.party_transactions.filter(is_deleted=False).values_list('id', flat=True):
            ledger.soft_delete_transaction(txn_id, f"Job sheet #{sheet.id} deleted: {reason}", deleted_by=deleted_by)
        for movement_id in sheet.inventory_transactions.filter(is_deleted=False).values_list('id', flat=True):
            inventory_services.soft_delete_movement(movement_id, f"Job sheet #{sheet.id} deleted: {reason}",
                                                    deleted_by=deleted_by)

        sheet.is_deleted = True
        sheet.deletion_reason = reason
        sheet.deleted_by = deleted_by
        sheet.deleted_at = timezone.now()
        sheet.save(update_fields=['is_deleted', 'deletion_reason', 'deleted_by', 'deleted_at', 'updated_at'])

    logger.info(f"Soft deleted job sheet {sheet.id} by {deleted_by}: {reason}")
    return sheet


def delete_job_sheet(sheet_id):
    """Hard delete a job sheet, its notes and its ledger and stock entries"""
    with transaction.atomic():
        sheet = _lock_sheet(sheet_id)

        for txn_id in PartyTransaction.objects.filter(job_sheet=sheet).values_list('id', flat=True):
            ledger.delete_transaction(txn_id)

        movements = InventoryTransaction.objects.filter(reference_job_sheet=sheet)
        item_ids = set(movements.values_list('inventory_item_id', flat=True))
        movements.delete()
        for item_id in item_ids:
            inventory_services.recompute_inventory_balance(item_id)

        sheet.delete()

    logger.info(f"Deleted job sheet {sheet_id}")
    return sheet_id
