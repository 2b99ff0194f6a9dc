import logging
from decimal import Decimal

from django.db import transaction
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError, NotFound
from rest_framework.permissions import IsAuthenticated

from printshop.core.exceptions import ConflictError
from printshop.core.permissions import is_admin_user
from printshop.core.responses import success_response, error_response
from printshop.core.utils import actor_name, create_audit_log
from . import ledger
from .filters import PartyFilter, PartyTransactionFilter
from .models import Party, PartyTransaction
from .serializers import PartySerializer, PartyTransactionSerializer

logger = logging.getLogger(__name__)

PARTY_LIST_LIMIT = 100
TRANSACTION_LIST_LIMIT = 200


def _admin_required(request):
    if not is_admin_user(request.user):
        return error_response('Admin access required', status=status.HTTP_403_FORBIDDEN)
    return None


def _ensure_party_deletable(party):
    if party.transactions.exists() or party.job_sheets.exists():
        raise ConflictError('Cannot delete party with existing transactions or orders')


def _create_party(request):
    serializer = PartySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    opening = request.data.get('balance')
    with transaction.atomic():
        party = serializer.save()
        if opening not in (None, ''):
            ledger.post_opening_balance(party.id, opening, created_by=actor_name(request))
            party.refresh_from_db()

    create_audit_log(request=request, action='create', model_name='Party', object_id=party.id,
                     object_name=party.name, changes={'balance': str(party.balance)})
    return success_response(PartySerializer(party).data, message='Party created successfully',
                            status=status.HTTP_201_CREATED)


def _update_party(request, party, partial):
    serializer = PartySerializer(party, data=request.data, partial=partial)
    serializer.is_valid(raise_exception=True)

    new_balance = request.data.get('balance')
    old_balance = party.balance
    with transaction.atomic():
        party = serializer.save()
        if new_balance not in (None, ''):
            ledger.set_party_balance(party.id, new_balance, created_by=actor_name(request))
            party.refresh_from_db()

    changes = {k: v for k, v in request.data.items() if k in serializer.fields and k != 'id'}
    if party.balance != old_balance:
        changes['balance'] = {'old': str(old_balance), 'new': str(party.balance)}
        create_audit_log(request=request, action='balance_change', model_name='Party', object_id=party.id,
                         object_name=party.name, changes=changes)
    else:
        create_audit_log(request=request, action='update', model_name='Party', object_id=party.id,
                         object_name=party.name, changes=changes)
    return success_response(PartySerializer(party).data, message='Party updated successfully')


def _delete_party(request, party):
    denied = _admin_required(request)
    if denied:
        return denied
    _ensure_party_deletable(party)
    party_id, name = party.id, party.name
    party.delete()
    create_audit_log(request=request, action='delete', model_name='Party', object_id=party_id, object_name=name)
    return success_response(None, message='Party deleted successfully')


def _require_id(value, message='Party ID is required'):
    if value in (None, ''):
        raise ValidationError(message)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(message)


@api_view(['GET', 'POST', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def party_list_create(request):
    """List, create, update (body id) or delete (?id=) parties"""
    if request.method == 'GET':
        filterset = PartyFilter(request.query_params, queryset=Party.objects.all())
        parties = filterset.qs.order_by('-created_at', '-id')[:PARTY_LIST_LIMIT]
        return success_response(PartySerializer(parties, many=True).data)
    elif request.method == 'POST':
        return _create_party(request)
    elif request.method == 'PUT':
        party_id = _require_id(request.data.get('id'))
        party = Party.objects.filter(pk=party_id).first()
        if party is None:
            raise NotFound('Party not found')
        return _update_party(request, party, partial=True)
    else:  # DELETE
        party_id = _require_id(request.query_params.get('id'))
        party = Party.objects.filter(pk=party_id).first()
        if party is None:
            raise NotFound('Party not found')
        return _delete_party(request, party)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def party_detail(request, pk):
    """Retrieve, update or delete a party"""
    party = Party.objects.filter(pk=pk).first()
    if party is None:
        raise NotFound('Party not found')

    if request.method == 'GET':
        return success_response(PartySerializer(party).data)
    elif request.method in ('PUT', 'PATCH'):
        return _update_party(request, party, partial=request.method == 'PATCH')
    else:  # DELETE
        return _delete_party(request, party)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def party_ledger(request, pk):
    """Non-deleted transactions oldest first with a running balance"""
    party = get_object_or_404(Party, pk=pk)
    transactions = PartyTransaction.objects.filter(party=party, is_deleted=False).order_by('created_at', 'id')

    running_balance = Decimal('0.00')
    entries = []
    for txn in transactions:
        running_balance += ledger.balance_delta(txn.type, txn.amount)
        entry = PartyTransactionSerializer(txn).data
        entry['running_balance'] = str(running_balance)
        entries.append(entry)

    return success_response({
        'party': PartySerializer(party).data,
        'entries': entries,
        'final_balance': str(running_balance),
        'in_sync': running_balance == party.balance,
    })


@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def party_transaction_list_create(request):
    """List, post or hard delete (?id=) ledger transactions"""
    if request.method == 'GET':
        queryset = PartyTransaction.objects.select_related('party')
        filterset = PartyTransactionFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        transactions = filterset.qs.order_by('-created_at', '-id')[:TRANSACTION_LIST_LIMIT]
        return success_response(PartyTransactionSerializer(transactions, many=True).data)

    elif request.method == 'POST':
        party_id = request.data.get('party_id')
        transaction_type = request.data.get('type')
        amount = request.data.get('amount')
        if party_id in (None, '') or not transaction_type or amount in (None, ''):
            raise ValidationError('Party ID, type, and amount are required')
        party_id = _require_id(party_id)

        txn = ledger.post_transaction(
            party_id,
            transaction_type,
            amount,
            description=(request.data.get('description') or '').strip(),
            created_by=actor_name(request),
        )
        create_audit_log(request=request, action='balance_change', model_name='PartyTransaction', object_id=txn.id,
                         object_name=txn.party.name,
                         changes={'type': txn.type, 'amount': str(txn.amount), 'balance_after': str(txn.balance_after)})
        return success_response(PartyTransactionSerializer(txn).data, message='Transaction created successfully',
                                status=status.HTTP_201_CREATED)

    else:  # DELETE
        denied = _admin_required(request)
        if denied:
            return denied
        txn_id = _require_id(request.query_params.get('id'), 'Transaction ID is required')
        party = ledger.delete_transaction(txn_id)
        create_audit_log(request=request, action='delete', model_name='PartyTransaction', object_id=txn_id,
                         object_name=party.name, changes={'balance': str(party.balance)})
        return success_response({'party_id': party.id, 'balance': str(party.balance)},
                                message='Transaction deleted successfully')


def _soft_delete(request, pk, reason):
    deleted_by = request.data.get('deleted_by') or actor_name(request)
    txn, party = ledger.soft_delete_transaction(pk, reason, deleted_by=deleted_by)
    create_audit_log(request=request, action='soft_delete', model_name='PartyTransaction', object_id=txn.id,
                     object_name=party.name,
                     changes={'reason': txn.deletion_reason, 'balance': str(party.balance)})
    data = PartyTransactionSerializer(txn).data
    data['party_balance'] = str(party.balance)
    return success_response(data, message='Transaction deleted successfully')


@api_view(['PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def transaction_detail(request, pk):
    """Soft delete or edit the description of a transaction, or hard delete it"""
    if request.method == 'PUT':
        if request.data.get('soft_delete'):
            reason = request.data.get('deletion_reason') or request.data.get('description')
            return _soft_delete(request, pk, reason)

        txn = PartyTransaction.objects.filter(pk=pk).first()
        if txn is None:
            raise NotFound('Transaction not found')
        if txn.is_deleted:
            raise ConflictError('Cannot edit a deleted transaction')
        if 'description' in request.data:
            txn.description = (request.data.get('description') or '').strip()
            txn.save(update_fields=['description'])
            create_audit_log(request=request, action='update', model_name='PartyTransaction', object_id=txn.id,
                             object_name=txn.party.name, changes={'description': txn.description})
        return success_response(PartyTransactionSerializer(txn).data, message='Transaction updated successfully')

    denied = _admin_required(request)
    if denied:
        return denied
    party = ledger.delete_transaction(pk)
    create_audit_log(request=request, action='delete', model_name='PartyTransaction', object_id=pk,
                     object_name=party.name, changes={'balance': str(party.balance)})
    return success_response({'party_id': party.id, 'balance': str(party.balance)},
                            message='Transaction deleted successfully')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def transaction_soft_delete(request, pk):
    """Soft delete a transaction; deletion_reason is required"""
    return _soft_delete(request, pk, request.data.get('deletion_reason'))
