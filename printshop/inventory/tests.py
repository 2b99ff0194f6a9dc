"""
Test suite for paper stock
Tests: movement arithmetic, reservations, soft delete recompute, endpoints and dashboard
"""
from unittest import mock

from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError

from printshop.core.exceptions import ConflictError
from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.inventory import services
from printshop.inventory.models import InventoryItem, InventoryTransaction


class SignedTotalSheetsTests(TestCase):

    def test_out_is_negative(self):
        self.assertEqual(services.signed_total_sheets('out', 5, 100), -500)

    def test_everything_else_is_positive(self):
        for transaction_type in ('in', 'adjustment', 'reserved', 'released'):
            self.assertEqual(services.signed_total_sheets(transaction_type, 3, 500), 1500)


class MovementServiceTests(TestCase):

    def setUp(self):
        self.party = TestDataFactory.create_party()
        self.paper_type = TestDataFactory.create_paper_type(gsm=170)

    def _receive(self, quantity, unit_size=1):
        return services.record_movement('in', quantity, unit_size=unit_size, party_id=self.party.id,
                                        paper_type_id=self.paper_type.id, gsm=170)

    def test_first_receipt_creates_item(self):
        movement = self._receive(2, unit_size=500)
        item = movement.inventory_item
        self.assertEqual(item.current_quantity, 1000)
        self.assertEqual(item.paper_type_name, self.paper_type.name)
        self.assertEqual(movement.balance_after, 1000)
        self.assertEqual(InventoryItem.objects.count(), 1)

    def test_out_reduces_and_may_go_negative(self):
        movement = self._receive(100)
        services.record_movement('out', 150, inventory_item=movement.inventory_item)
        item = InventoryItem.objects.get(pk=movement.inventory_item_id)
        self.assertEqual(item.current_quantity, -50)

    def test_reserve_and_release(self):
        item = self._receive(1000).inventory_item
        services.record_movement('reserved', 300, inventory_item=item)
        services.record_movement('released', 100, inventory_item=item)
        item.refresh_from_db()
        self.assertEqual(item.current_quantity, 1000)
        self.assertEqual(item.reserved_quantity, 200)
        self.assertEqual(item.available_quantity, 800)

    def test_release_more_than_reserved(self):
        item = self._receive(1000).inventory_item
        with self.assertRaises(ValidationError):
            services.record_movement('released', 1, inventory_item=item)

    def test_invalid_input(self):
        with self.assertRaises(ValidationError):
            services.record_movement('gift', 1, party_id=self.party.id)
        with self.assertRaises(ValidationError):
            services.record_movement('in', 0, party_id=self.party.id)
        with self.assertRaises(ValidationError):
            services.record_movement('in', 5)

    def test_soft_delete_recomputes(self):
        first = self._receive(100)
        second = self._receive(40)
        movement, item = services.soft_delete_movement(second.id, 'Counted twice', deleted_by='Dwarika')
        self.assertTrue(movement.is_deleted)
        self.assertEqual(movement.deleted_by, 'Dwarika')
        self.assertEqual(item.current_quantity, 100)
        self.assertEqual(item.id, first.inventory_item_id)

    def test_soft_delete_twice_rejected(self):
        movement = self._receive(100)
        services.soft_delete_movement(movement.id, 'Wrong paper')
        with self.assertRaises(ConflictError):
            services.soft_delete_movement(movement.id, 'Again')

    def test_soft_delete_requires_reason(self):
        movement = self._receive(100)
        with self.assertRaises(ValidationError):
            services.soft_delete_movement(movement.id, ' ')

    def test_failed_recompute_keeps_soft_delete(self):
        movement = self._receive(100)
        with mock.patch.object(services, 'recompute_inventory_balance', side_effect=RuntimeError('db down')):
            deleted, item = services.soft_delete_movement(movement.id, 'Wrong paper')
        self.assertIsNone(item)
        self.assertTrue(InventoryTransaction.objects.get(pk=deleted.id).is_deleted)


class InventoryAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(display_name='Dwarika')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.party = TestDataFactory.create_party()
        self.paper_type = TestDataFactory.create_paper_type()

    def test_record_movement(self):
        response = self.client.post('/api/v1/inventory/', {
            'party_id': self.party.id,
            'paper_type_id': self.paper_type.id,
            'gsm': 130,
            'transaction_type': 'in',
            'quantity': 4,
            'unit_type': 'packets',
            'unit_size': 100,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['total_sheets'], 400)
        self.assertEqual(response.data['data']['created_by'], 'Dwarika')

    def test_record_movement_requires_party(self):
        response = self.client.post('/api/v1/inventory/', {'transaction_type': 'in', 'quantity': 4})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Party ID is required')

    def test_list_by_party(self):
        TestDataFactory.create_inventory_item(party=self.party, paper_type=self.paper_type)
        TestDataFactory.create_inventory_item()
        response = self.client.get(f'/api/v1/inventory/?party_id={self.party.id}')
        self.assertEqual(len(response.data['data']), 1)

    def test_non_numeric_party_filter(self):
        response = self.client.get('/api/v1/inventory/?party_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid party ID')

        response = self.client.get('/api/v1/inventory/transactions/?party_id=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_soft_delete_endpoint(self):
        movement = services.record_movement('in', 500, party_id=self.party.id, paper_type_id=self.paper_type.id, gsm=130)
        url = f'/api/v1/inventory/transactions/{movement.id}/soft-delete/'
        response = self.client.patch(url, {'deletion_reason': 'Entered twice'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['current_quantity'], 0)

        response = self.client.patch(url, {'deletion_reason': 'Entered twice'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_transactions_hide_deleted(self):
        movement = services.record_movement('in', 500, party_id=self.party.id)
        services.soft_delete_movement(movement.id, 'Wrong party')
        response = self.client.get('/api/v1/inventory/transactions/')
        self.assertEqual(response.data['data'], [])
        response = self.client.get('/api/v1/inventory/transactions/?include_deleted=true')
        self.assertEqual(len(response.data['data']), 1)

    def test_delete_item_requires_admin(self):
        item = TestDataFactory.create_inventory_item(party=self.party)
        response = self.client.delete(f'/api/v1/inventory/?id={item.id}&type=item')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/inventory/?id={item.id}&type=item')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(InventoryItem.objects.filter(pk=item.id).exists())

    def test_delete_requires_id(self):
        response = self.client.delete('/api/v1/inventory/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Item ID is required')

    def test_dashboard(self):
        TestDataFactory.create_inventory_item(party=self.party, current_quantity=200)
        TestDataFactory.create_inventory_item(party=self.party, gsm=300, current_quantity=5000)
        TestDataFactory.create_inventory_item(current_quantity=-40)

        response = self.client.get('/api/v1/inventory/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = response.data['data']['stats']
        self.assertEqual(stats['totalItems'], 3)
        self.assertEqual(stats['totalQuantity'], 5160)
        self.assertEqual(stats['lowStockItems'], 1)
        self.assertEqual(stats['debtItems'], 1)
        self.assertEqual(stats['totalDebtQuantity'], 40)
        self.assertEqual(response.data['data']['topParties'][0]['party_id'], self.party.id)
