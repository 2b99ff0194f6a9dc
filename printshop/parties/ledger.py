"""
Party ledger.

Every write to `Party.balance` goes through this module. The balance is
kept equal to sum(payment + adjustment) - sum(order) over the party's
non-deleted transactions:

    payment     +amount
    order       -amount
    adjustment  +amount

Each mutation locks the party row and runs in a single database
transaction so the transaction row and the balance never disagree.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from printshop.core.exceptions import ConflictError
from .models import Party, PartyTransaction

logger = logging.getLogger(__name__)

TRANSACTION_TYPES = ('payment', 'order', 'adjustment')
REVERSIBLE_TYPES = ('payment', 'order')

CENT = Decimal('0.01')
# Largest magnitude a DecimalField(max_digits=12, decimal_places=2) column holds
MAX_AMOUNT = Decimal('9999999999.99')


def balance_delta(transaction_type, amount):
    """Signed effect of a transaction on the party balance"""
    if transaction_type == 'order':
        return -amount
    if transaction_type in ('payment', 'adjustment'):
        return amount
    raise ValidationError('Invalid transaction type')


def parse_amount(value):
    """Positive Decimal with two places, or a 400"""
    if isinstance(value, bool):
        raise ValidationError('Amount must be a positive number')
    try:
        amount = Decimal(str(value).strip()).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError('Amount must be a positive number')
    if not amount.is_finite() or amount <= 0:
        raise ValidationError('Amount must be a positive number')
    if amount > MAX_AMOUNT:
        raise ValidationError('Amount is too large')
    return amount


def parse_balance(value):
    """Signed Decimal balance with two places, or a 400"""
    try:
        balance = Decimal(str(value).strip()).quantize(CENT)
    except (InvalidOperation, ValueError):
        raise ValidationError('Balance must be a number')
    if not balance.is_finite():
        raise ValidationError('Balance must be a number')
    if abs(balance) > MAX_AMOUNT:
        raise ValidationError('Balance is out of range')
    return balance


def _check_party_range(party):
    for field in ('balance', 'total_orders', 'total_payments'):
        if abs(getattr(party, field)) > MAX_AMOUNT:
            raise ValidationError('Resulting balance is out of range')


def format_amount(amount):
    return f"₹{amount.normalize():f}" if amount == amount.to_integral() else f"₹{amount:.2f}"


def _lock_party(party_id):
    party = Party.objects.select_for_update().filter(pk=party_id).first()
    if party is None:
        raise NotFound('Party not found')
    return party


def _apply_totals(party, transaction_type, amount, sign):
    if transaction_type == 'order':
        party.total_orders += sign * amount
    elif transaction_type == 'payment':
        party.total_payments += sign * amount


def post_transaction(party_id, transaction_type, amount, description='', created_by='Admin', job_sheet=None):
    """
    Record a ledger transaction and move the party balance.

    Returns the saved PartyTransaction whose `balance_after` is the new
    party balance.
    """
    if transaction_type not in TRANSACTION_TYPES:
        raise ValidationError('Invalid transaction type')
    amount = parse_amount(amount)

    with transaction.atomic():
        party = _lock_party(party_id)
        new_balance = party.balance + balance_delta(transaction_type, amount)
        party.balance = new_balance
        _apply_totals(party, transaction_type, amount, 1)
        _check_party_range(party)

        txn = PartyTransaction.objects.create(
            party=party,
            type=transaction_type,
            amount=amount,
            description=description or f"{transaction_type.capitalize()} - {format_amount(amount)}",
            balance_after=new_balance,
            job_sheet=job_sheet,
            created_by=created_by or 'Admin',
        )
        party.save(update_fields=['balance', 'total_orders', 'total_payments', 'updated_at'])

    logger.info(f"Party {party.id} {transaction_type} {amount}: balance now {new_balance}")
    return txn


def reverse_transaction(txn):
    """
    Undo the balance effect of `txn` on its party. Caller must hold an
    open transaction; the party row is locked here.
    """
    if txn.type not in REVERSIBLE_TYPES:
        raise ValidationError('Adjustment transactions cannot be deleted')

    party = _lock_party(txn.party_id)
    party.balance -= balance_delta(txn.type, txn.amount)
    _apply_totals(party, txn.type, txn.amount, -1)
    _check_party_range(party)
    party.save(update_fields=['balance', 'total_orders', 'total_payments', 'updated_at'])
    return party


def _lock_transaction(txn_id):
    txn = PartyTransaction.objects.select_for_update().filter(pk=txn_id).first()
    if txn is None:
        raise NotFound('Transaction not found')
    return txn


def soft_delete_transaction(txn_id, reason, deleted_by='Admin'):
    """Mark a transaction deleted and reverse its effect on the balance"""
    if not reason or not str(reason).strip():
        raise ValidationError('Deletion reason is required')

    with transaction.atomic():
        txn = _lock_transaction(txn_id)
        if txn.is_deleted:
            raise ConflictError('Transaction is already deleted')

        party = reverse_transaction(txn)
        txn.is_deleted = True
        txn.deletion_reason = str(reason).strip()
        txn.deleted_by = deleted_by or 'Admin'
        txn.deleted_at = timezone.now()
        txn.save(update_fields=['is_deleted', 'deletion_reason', 'deleted_by', 'deleted_at'])

    logger.info(f"Soft deleted transaction {txn.id} ({txn.type} {txn.amount}); party {party.id} balance now {party.balance}")
    return txn, party


def delete_transaction(txn_id):
    """Remove a transaction, reversing it first unless it is already soft deleted"""
    with transaction.atomic():
        txn = _lock_transaction(txn_id)
        if txn.type not in REVERSIBLE_TYPES:
            raise ValidationError('Adjustment transactions cannot be deleted')

        if txn.is_deleted:
            party = Party.objects.get(pk=txn.party_id)
        else:
            party = reverse_transaction(txn)
        txn.delete()

    logger.info(f"Deleted transaction {txn_id}; party {party.id} balance now {party.balance}")
    return party


def compute_party_stats(party):
    """Balance and totals derived from the party's non-deleted transactions"""
    sums = {
        row['type']: row['total'] or Decimal('0.00')
        for row in PartyTransaction.objects.filter(party=party, is_deleted=False)
        .order_by().values('type').annotate(total=Sum('amount'))
    }
    payments = sums.get('payment', Decimal('0.00'))
    orders = sums.get('order', Decimal('0.00'))
    adjustments = sums.get('adjustment', Decimal('0.00'))
    return {
        'balance': payments + adjustments - orders,
        'total_payments': payments,
        'total_orders': orders,
    }


def recompute_party_balance(party_id):
    """Rewrite balance and totals from the ledger; returns (party, changed)"""
    with transaction.atomic():
        party = _lock_party(party_id)
        stats = compute_party_stats(party)
        changed = any(getattr(party, field) != value for field, value in stats.items())
        if changed:
            logger.warning(f"Party {party.id} balance drift: {party.balance} -> {stats['balance']}")
            for field, value in stats.items():
                setattr(party, field, value)
            party.save(update_fields=['balance', 'total_orders', 'total_payments', 'updated_at'])
    return party, changed


def set_party_balance(party_id, new_balance, created_by='Admin'):
    """
    Move a party to `new_balance` by posting the difference to the ledger.
    Increases are adjustments, decreases are orders. Returns the posted
    transaction or None when the balance is unchanged.
    """
    target = parse_balance(new_balance)

    with transaction.atomic():
        party = _lock_party(party_id)
        difference = target - party.balance
        if difference == 0:
            return None
        if difference > 0:
            return post_transaction(party_id, 'adjustment', difference,
                                    description=f"Balance adjustment: +{difference:.2f}", created_by=created_by)
        return post_transaction(party_id, 'order', -difference,
                                description=f"Balance adjustment: -{-difference:.2f}", created_by=created_by)


def post_opening_balance(party_id, opening_balance, created_by='Admin'):
    """Record a new party's starting balance as a payment (credit) or an order (debt)"""
    opening = parse_balance(opening_balance)
    if opening == 0:
        return None
    if opening > 0:
        return post_transaction(party_id, 'payment', opening, description='Opening balance', created_by=created_by)
    return post_transaction(party_id, 'order', -opening, description='Opening balance', created_by=created_by)
