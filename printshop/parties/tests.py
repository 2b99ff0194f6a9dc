"""
Test suite for the party ledger
Tests: balance reducer, soft delete / hard delete reversal, balance edits, party CRUD
"""
from decimal import Decimal
from io import StringIO

from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError

from printshop.core.exceptions import ConflictError
from printshop.core.models import AuditLog
from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.parties import ledger
from printshop.parties.models import Party, PartyTransaction


class LedgerServiceTests(TestCase):
    """Balance arithmetic in parties.ledger"""

    def setUp(self):
        self.party = TestDataFactory.create_party(balance=Decimal('1000.00'))

    def test_payment_adds_to_balance(self):
        txn = ledger.post_transaction(self.party.id, 'payment', '500')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1500.00'))
        self.assertEqual(txn.balance_after, Decimal('1500.00'))

    def test_order_subtracts_from_balance(self):
        txn = ledger.post_transaction(self.party.id, 'order', '250.50')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('749.50'))
        self.assertEqual(txn.balance_after, Decimal('749.50'))

    def test_adjustment_adds_to_balance(self):
        ledger.post_transaction(self.party.id, 'adjustment', 100)
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1100.00'))

    def test_totals_track_orders_and_payments(self):
        ledger.post_transaction(self.party.id, 'order', 300)
        ledger.post_transaction(self.party.id, 'payment', 200)
        self.party.refresh_from_db()
        self.assertEqual(self.party.total_orders, Decimal('300.00'))
        # opening balance of 1000 is recorded as a payment
        self.assertEqual(self.party.total_payments, Decimal('1200.00'))

    def test_default_description(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 500)
        self.assertEqual(txn.description, 'Payment - ₹500')

    def test_invalid_amounts_rejected(self):
        for amount in ('abc', 0, -5, '', None, True, 'NaN', 'Infinity'):
            with self.assertRaises(ValidationError):
                ledger.post_transaction(self.party.id, 'payment', amount)
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))

    def test_invalid_type_rejected(self):
        with self.assertRaises(ValidationError):
            ledger.post_transaction(self.party.id, 'refund', 10)

    def test_unknown_party(self):
        with self.assertRaises(NotFound):
            ledger.post_transaction(999999, 'payment', 10)

    def test_amount_too_large(self):
        with self.assertRaises(ValidationError):
            ledger.parse_amount('99999999999999')
        with self.assertRaises(ValidationError):
            ledger.post_transaction(self.party.id, 'payment', '99999999999999')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))

    def test_resulting_balance_out_of_range(self):
        with self.assertRaises(ValidationError) as ctx:
            ledger.post_transaction(self.party.id, 'payment', '9999999999.00')
        self.assertIn('out of range', str(ctx.exception.detail))
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))
        self.assertEqual(self.party.total_payments, Decimal('1000.00'))
        self.assertEqual(PartyTransaction.objects.filter(party=self.party).count(), 1)

    def test_balance_out_of_range(self):
        with self.assertRaises(ValidationError):
            ledger.set_party_balance(self.party.id, '-99999999999')
        with self.assertRaises(ValidationError):
            ledger.post_opening_balance(self.party.id, 'NaN')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))

    def test_soft_delete_payment_reverses(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 500)
        ledger.soft_delete_transaction(txn.id, 'Entered twice')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))

    def test_soft_delete_order_reverses(self):
        txn = ledger.post_transaction(self.party.id, 'order', 400)
        ledger.soft_delete_transaction(txn.id, 'Wrong party')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))
        self.assertEqual(self.party.total_orders, Decimal('0.00'))

    def test_soft_delete_requires_reason(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 500)
        for reason in (None, '', '   '):
            with self.assertRaises(ValidationError):
                ledger.soft_delete_transaction(txn.id, reason)
        txn.refresh_from_db()
        self.assertFalse(txn.is_deleted)

    def test_soft_delete_twice_rejected(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 500)
        ledger.soft_delete_transaction(txn.id, 'Duplicate', deleted_by='Guddu')
        with self.assertRaises(ConflictError):
            ledger.soft_delete_transaction(txn.id, 'Again')
        txn.refresh_from_db()
        self.party.refresh_from_db()
        self.assertEqual(txn.deletion_reason, 'Duplicate')
        self.assertEqual(txn.deleted_by, 'Guddu')
        self.assertEqual(self.party.balance, Decimal('1000.00'))

    def test_adjustment_cannot_be_deleted(self):
        txn = ledger.post_transaction(self.party.id, 'adjustment', 50)
        with self.assertRaises(ValidationError):
            ledger.soft_delete_transaction(txn.id, 'Oops')
        with self.assertRaises(ValidationError):
            ledger.delete_transaction(txn.id)

    def test_hard_delete_reverses(self):
        txn = ledger.post_transaction(self.party.id, 'order', 200)
        party = ledger.delete_transaction(txn.id)
        self.assertEqual(party.balance, Decimal('1000.00'))
        self.assertFalse(PartyTransaction.objects.filter(pk=txn.id).exists())

    def test_hard_delete_of_soft_deleted_does_not_reverse_twice(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 300)
        ledger.soft_delete_transaction(txn.id, 'Bounced cheque')
        party = ledger.delete_transaction(txn.id)
        self.assertEqual(party.balance, Decimal('1000.00'))

    def test_set_party_balance_increase_and_decrease(self):
        up = ledger.set_party_balance(self.party.id, '1200')
        self.assertEqual(up.type, 'adjustment')
        self.assertEqual(up.amount, Decimal('200.00'))
        down = ledger.set_party_balance(self.party.id, '900')
        self.assertEqual(down.type, 'order')
        self.assertEqual(down.amount, Decimal('300.00'))
        self.assertIsNone(ledger.set_party_balance(self.party.id, '900.00'))
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('900.00'))

    def test_recompute_fixes_drift(self):
        ledger.post_transaction(self.party.id, 'order', 100)
        Party.objects.filter(pk=self.party.id).update(balance=Decimal('5.00'))
        party, changed = ledger.recompute_party_balance(self.party.id)
        self.assertTrue(changed)
        self.assertEqual(party.balance, Decimal('900.00'))
        party, changed = ledger.recompute_party_balance(self.party.id)
        self.assertFalse(changed)

    def test_negative_opening_balance_is_an_order(self):
        party = TestDataFactory.create_party(balance=Decimal('-250.00'))
        txn = party.transactions.get()
        self.assertEqual(txn.type, 'order')
        self.assertEqual(party.balance, Decimal('-250.00'))

    def test_format_amount(self):
        self.assertEqual(ledger.format_amount(Decimal('500.00')), '₹500')
        self.assertEqual(ledger.format_amount(Decimal('12.50')), '₹12.50')


class RepairPartyBalancesCommandTests(TestCase):

    def setUp(self):
        self.party = TestDataFactory.create_party(balance=Decimal('1000.00'))
        ledger.post_transaction(self.party.id, 'order', 400)
        Party.objects.filter(pk=self.party.id).update(balance=Decimal('0.00'))

    def test_dry_run_rolls_back(self):
        out = StringIO()
        call_command('repair_party_balances', '--dry-run', stdout=out)
        self.assertIn('1 parties would change', out.getvalue())
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('0.00'))

    def test_repairs_balance(self):
        other = TestDataFactory.create_party(balance=Decimal('50.00'))
        call_command('repair_party_balances', '--party-id', str(self.party.id), stdout=StringIO())
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('600.00'))
        self.assertEqual(self.party.total_orders, Decimal('400.00'))
        other.refresh_from_db()
        self.assertEqual(other.balance, Decimal('50.00'))


class PartyTransactionAPITests(TestCase):
    """Ledger endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(display_name='Guddu')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.party = TestDataFactory.create_party(balance=Decimal('1000.00'))

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/parties/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])

    def test_payment_end_to_end(self):
        response = self.client.post('/api/v1/parties/transactions/', {
            'party_id': self.party.id, 'type': 'payment', 'amount': 500,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['success'])
        self.assertEqual(Decimal(response.data['data']['balance_after']), Decimal('1500.00'))
        self.assertEqual(response.data['data']['created_by'], 'Guddu')

        response = self.client.get(f'/api/v1/parties/{self.party.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['data']['balance']), Decimal('1500.00'))

    def test_missing_fields(self):
        response = self.client.post('/api/v1/parties/transactions/', {'party_id': self.party.id, 'type': 'payment'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Party ID, type, and amount are required')

    def test_non_numeric_amount(self):
        response = self.client.post('/api/v1/parties/transactions/', {
            'party_id': self.party.id, 'type': 'payment', 'amount': 'lots',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Amount must be a positive number')

    def test_oversized_amount(self):
        response = self.client.post('/api/v1/parties/transactions/', {
            'party_id': self.party.id, 'type': 'payment', 'amount': '99999999999999',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Amount is too large')

        response = self.client.get(f'/api/v1/parties/{self.party.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['data']['balance']), Decimal('1000.00'))

    def test_unknown_party(self):
        response = self.client.post('/api/v1/parties/transactions/', {
            'party_id': 999999, 'type': 'payment', 'amount': 10,
        })
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Party not found')

    def test_soft_delete_twice(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 500)
        url = f'/api/v1/transactions/{txn.id}/soft-delete/'

        response = self.client.patch(url, {'deletion_reason': 'Duplicate entry'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['data']['party_balance']), Decimal('1000.00'))

        response = self.client.patch(url, {'deletion_reason': 'Again'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Transaction is already deleted')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1000.00'))

    def test_soft_delete_without_reason(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 500)
        response = self.client.patch(f'/api/v1/transactions/{txn.id}/soft-delete/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Deletion reason is required')

    def test_soft_delete_via_put(self):
        txn = ledger.post_transaction(self.party.id, 'order', 200)
        response = self.client.put(f'/api/v1/transactions/{txn.id}/', {
            'soft_delete': True, 'deletion_reason': 'Cancelled order',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        txn.refresh_from_db()
        self.assertTrue(txn.is_deleted)
        self.assertEqual(txn.deleted_by, 'Guddu')

    def test_edit_description(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 200)
        response = self.client.put(f'/api/v1/transactions/{txn.id}/', {'description': 'UPI payment'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['description'], 'UPI payment')

    def test_list_hides_deleted(self):
        keep = ledger.post_transaction(self.party.id, 'payment', 100)
        gone = ledger.post_transaction(self.party.id, 'payment', 200)
        ledger.soft_delete_transaction(gone.id, 'Duplicate')

        response = self.client.get(f'/api/v1/parties/transactions/?party_id={self.party.id}')
        ids = [row['id'] for row in response.data['data']]
        self.assertIn(keep.id, ids)
        self.assertNotIn(gone.id, ids)

        response = self.client.get(f'/api/v1/parties/transactions/?party_id={self.party.id}&include_deleted=true')
        ids = [row['id'] for row in response.data['data']]
        self.assertIn(gone.id, ids)

    def test_hard_delete_requires_admin(self):
        txn = ledger.post_transaction(self.party.id, 'payment', 100)
        response = self.client.delete(f'/api/v1/transactions/{txn.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/transactions/{txn.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['data']['balance']), Decimal('1000.00'))

    def test_ledger_running_balance(self):
        ledger.post_transaction(self.party.id, 'order', 300)
        response = self.client.get(f'/api/v1/parties/{self.party.id}/ledger/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        entries = response.data['data']['entries']
        self.assertEqual([e['running_balance'] for e in entries], ['1000.00', '700.00'])
        self.assertTrue(response.data['data']['in_sync'])

    def test_post_writes_audit_log(self):
        self.client.post('/api/v1/parties/transactions/', {
            'party_id': self.party.id, 'type': 'order', 'amount': 50,
        })
        self.assertTrue(AuditLog.objects.filter(action='balance_change', model_name='PartyTransaction').exists())


class PartyAPITests(TestCase):
    """Party CRUD endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_with_opening_balance(self):
        response = self.client.post('/api/v1/parties/', {'name': 'Sharma Prints', 'balance': '750'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        party = Party.objects.get(name='Sharma Prints')
        self.assertEqual(party.balance, Decimal('750.00'))
        self.assertEqual(party.transactions.get().description, 'Opening balance')

    def test_create_requires_name(self):
        response = self.client.post('/api/v1/parties/', {'name': '  '})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Party name is required')

    def test_invalid_email(self):
        response = self.client.post('/api/v1/parties/', {'name': 'A', 'email': 'not-an-email'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Invalid email format', response.data['error'])

    def test_search(self):
        TestDataFactory.create_party(name='Ganesh Traders')
        TestDataFactory.create_party(name='Mohan Stores')
        response = self.client.get('/api/v1/parties/?search=ganesh')
        self.assertEqual([p['name'] for p in response.data['data']], ['Ganesh Traders'])

    def test_balance_edit_posts_to_ledger(self):
        party = TestDataFactory.create_party(balance=Decimal('100.00'))
        response = self.client.patch(f'/api/v1/parties/{party.id}/', {'balance': '40'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        party.refresh_from_db()
        self.assertEqual(party.balance, Decimal('40.00'))
        latest = party.transactions.order_by('-id').first()
        self.assertEqual(latest.type, 'order')
        self.assertEqual(latest.description, 'Balance adjustment: -60.00')

    def test_update_by_body_id(self):
        party = TestDataFactory.create_party(name='Old')
        response = self.client.put('/api/v1/parties/', {'id': party.id, 'name': 'New'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        party.refresh_from_db()
        self.assertEqual(party.name, 'New')

    def test_delete_requires_admin(self):
        party = TestDataFactory.create_party()
        response = self.client.delete(f'/api/v1/parties/{party.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Party.objects.filter(pk=party.id).exists())

    def test_delete_blocked_by_transactions(self):
        party = TestDataFactory.create_party(balance=Decimal('10.00'))
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/parties/?id={party.id}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete party with existing transactions or orders')

    def test_delete(self):
        party = TestDataFactory.create_party()
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/parties/?id={party.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Party.objects.filter(pk=party.id).exists())

    def test_missing_party(self):
        response = self.client.get('/api/v1/parties/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Party not found')
