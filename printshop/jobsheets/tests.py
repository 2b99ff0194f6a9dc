"""
Test suite for job sheets
Tests: billing on create, stock usage, soft delete / hard delete reversal, notes, paper types
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import ValidationError

from printshop.core.exceptions import ConflictError
from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.inventory import services as inventory_services
from printshop.jobsheets import services
from printshop.jobsheets.models import JobSheet, JobSheetNote, PaperType
from printshop.parties.models import PartyTransaction


class JobSheetServiceTests(TestCase):

    def setUp(self):
        self.party = TestDataFactory.create_party(balance=Decimal('2000.00'))
        self.paper_type = TestDataFactory.create_paper_type(gsm=130)
        self.item = inventory_services.record_movement(
            'in', 1000, party_id=self.party.id, paper_type_id=self.paper_type.id, gsm=130,
        ).inventory_item

    def _create(self, **data):
        data.setdefault('party', self.party)
        data.setdefault('description', 'Letterheads')
        data.setdefault('printing', Decimal('600.00'))
        data.setdefault('uv', Decimal('150.00'))
        data.setdefault('baking', Decimal('50.00'))
        return services.create_job_sheet(data, created_by='Supervisor')

    def test_create_bills_party(self):
        sheet = self._create()
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('1200.00'))
        self.assertEqual(sheet.party_balance_before, Decimal('2000.00'))
        self.assertEqual(sheet.party_balance_after, Decimal('1200.00'))
        self.assertEqual(sheet.party_name, self.party.name)

        txn = PartyTransaction.objects.get(job_sheet=sheet)
        self.assertEqual(txn.type, 'order')
        self.assertEqual(txn.amount, Decimal('800.00'))
        self.assertEqual(txn.description, f'Job Sheet #{sheet.id}: Letterheads')
        self.assertEqual(txn.created_by, 'Supervisor')

    def test_zero_cost_sheet_is_not_billed(self):
        sheet = self._create(printing=Decimal('0'), uv=Decimal('0'), baking=Decimal('0'))
        self.assertFalse(PartyTransaction.objects.filter(job_sheet=sheet).exists())

    def test_walk_in_sheet_is_not_billed(self):
        sheet = self._create(party=None, party_name='Walk-in')
        self.assertIsNone(sheet.party_balance_after)

    def test_create_takes_paper_from_stock(self):
        sheet = self._create(used_from_inventory=True, inventory_item=self.item, paper_sheet=250)
        self.item.refresh_from_db()
        self.assertEqual(self.item.current_quantity, 750)
        movement = sheet.inventory_transactions.get()
        self.assertEqual(movement.transaction_type, 'out')
        self.assertEqual(movement.total_sheets, -250)
        self.assertEqual(movement.created_by, 'Job Sheet')
        self.assertEqual(movement.description, f'Used for Job Sheet #{sheet.id}: Letterheads')

    def test_soft_delete_reverses_balance_and_stock(self):
        sheet = self._create(used_from_inventory=True, inventory_item=self.item, paper_sheet=250)
        services.soft_delete_job_sheet(sheet.id, 'Customer cancelled', deleted_by='Guddu')

        self.party.refresh_from_db()
        self.item.refresh_from_db()
        sheet.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('2000.00'))
        self.assertEqual(self.item.current_quantity, 1000)
        self.assertTrue(sheet.is_deleted)
        self.assertEqual(sheet.deleted_by, 'Guddu')
        self.assertTrue(PartyTransaction.objects.get(job_sheet=sheet).is_deleted)

    def test_soft_delete_twice_rejected(self):
        sheet = self._create()
        services.soft_delete_job_sheet(sheet.id, 'Duplicate')
        with self.assertRaises(ConflictError):
            services.soft_delete_job_sheet(sheet.id, 'Duplicate')
        self.party.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('2000.00'))

    def test_soft_delete_requires_reason(self):
        sheet = self._create()
        with self.assertRaises(ValidationError):
            services.soft_delete_job_sheet(sheet.id, '')

    def test_hard_delete_reverses_and_removes_everything(self):
        sheet = self._create(used_from_inventory=True, inventory_item=self.item, paper_sheet=100)
        JobSheetNote.objects.create(job_sheet=sheet, note='Rush order')
        services.delete_job_sheet(sheet.id)

        self.party.refresh_from_db()
        self.item.refresh_from_db()
        self.assertEqual(self.party.balance, Decimal('2000.00'))
        self.assertEqual(self.item.current_quantity, 1000)
        self.assertFalse(JobSheet.objects.filter(pk=sheet.id).exists())
        self.assertFalse(JobSheetNote.objects.exists())

    def test_billed_sheet_cost_is_frozen(self):
        sheet = self._create()
        with self.assertRaises(ValidationError):
            services.update_job_sheet(sheet, {'printing': Decimal('900.00')})
        services.update_job_sheet(sheet, {'description': 'Letterheads, 2 colour'})
        sheet.refresh_from_db()
        self.assertEqual(sheet.description, 'Letterheads, 2 colour')


class JobSheetAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(display_name='Guddu')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.party = TestDataFactory.create_party(balance=Decimal('1000.00'))

    def test_create(self):
        response = self.client.post('/api/v1/job-sheets/', {
            'party_id': self.party.id,
            'description': 'Wedding cards',
            'paper_sheet': 500,
            'imp': 2000,
            'printing': '300.00',
            'uv': '100.00',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.data['data']
        self.assertEqual(data['party_name'], self.party.name)
        self.assertEqual(Decimal(data['total_cost']), Decimal('400.00'))
        self.assertEqual(Decimal(data['party_balance']), Decimal('600.00'))
        self.assertEqual(data['job_status'], 'pending')

    def test_create_unknown_party(self):
        response = self.client.post('/api/v1/job-sheets/', {'party_id': 999999, 'printing': '10'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Party not found', response.data['error'])

    def test_inventory_item_required_when_using_stock(self):
        response = self.client.post('/api/v1/job-sheets/', {'party_id': self.party.id, 'used_from_inventory': True})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Inventory item is required when paper is used from inventory')

    def test_list_hides_deleted(self):
        keep = TestDataFactory.create_job_sheet(party=self.party)
        gone = TestDataFactory.create_job_sheet(party=self.party)
        services.soft_delete_job_sheet(gone.id, 'Duplicate')

        response = self.client.get('/api/v1/job-sheets/')
        self.assertEqual([row['id'] for row in response.data['data']], [keep.id])

        response = self.client.get('/api/v1/job-sheets/?include_deleted=true')
        self.assertEqual({row['id'] for row in response.data['data']}, {keep.id, gone.id})

    def test_filters(self):
        machine = TestDataFactory.create_machine()
        on_machine = TestDataFactory.create_job_sheet(machine=machine, job_status='assigned', description='Posters')
        TestDataFactory.create_job_sheet(description='Brochures')

        response = self.client.get(f'/api/v1/job-sheets/?machine_id={machine.id}')
        self.assertEqual([row['id'] for row in response.data['data']], [on_machine.id])
        response = self.client.get('/api/v1/job-sheets/?search=poster')
        self.assertEqual([row['id'] for row in response.data['data']], [on_machine.id])
        response = self.client.get('/api/v1/job-sheets/?job_status=assigned')
        self.assertEqual([row['id'] for row in response.data['data']], [on_machine.id])

    def test_soft_delete_endpoint(self):
        sheet = TestDataFactory.create_job_sheet(party=self.party)
        url = f'/api/v1/job-sheets/{sheet.id}/soft-delete/'
        response = self.client.patch(url, {'deletion_reason': 'Entered twice'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Job sheet marked as deleted successfully')
        self.assertEqual(response.data['data']['deleted_by'], 'Guddu')

        response = self.client.patch(url, {'deletion_reason': 'Entered twice'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Job sheet is already marked as deleted')

    def test_hard_delete_requires_admin(self):
        sheet = TestDataFactory.create_job_sheet()
        response = self.client.delete(f'/api/v1/job-sheets/{sheet.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/job-sheets/{sheet.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(JobSheet.objects.filter(pk=sheet.id).exists())

    def test_detail_includes_notes(self):
        sheet = TestDataFactory.create_job_sheet()
        response = self.client.post('/api/v1/job-sheet-notes/', {'job_sheet_id': sheet.id, 'note': 'Use matte lamination'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['author'], 'Guddu')

        response = self.client.get(f'/api/v1/job-sheets/{sheet.id}/')
        self.assertEqual([n['note'] for n in response.data['data']['notes']], ['Use matte lamination'])

    def test_report(self):
        sheet = TestDataFactory.create_job_sheet(printing=Decimal('500.00'), uv=Decimal('120.00'),
                                                 baking=Decimal('30.00'))
        JobSheetNote.objects.create(job_sheet=sheet, note='Deliver by Friday', author='Guddu')

        response = self.client.post(f'/api/v1/job-sheets/{sheet.id}/report/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertRegex(data['reportNumber'], rf'^GO-JS-{sheet.id}-\d{{6}}$')
        self.assertEqual(data['jobSheet']['id'], sheet.id)
        self.assertEqual(data['jobSheet']['totalCost'], Decimal('650.00'))
        self.assertEqual([n['note'] for n in data['notes']], ['Deliver by Friday'])
        self.assertTrue(data['generatedAt'])

        response = self.client.post('/api/v1/job-sheets/999999/report/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Job sheet not found')

    def test_note_requires_text(self):
        sheet = TestDataFactory.create_job_sheet()
        response = self.client.post('/api/v1/job-sheet-notes/', {'job_sheet_id': sheet.id, 'note': ''})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Job sheet ID and note are required')

    def test_paper_types(self):
        response = self.client.post('/api/v1/paper-types/', {'name': 'Maplitho', 'gsm': 80})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post('/api/v1/paper-types/', {'name': 'maplitho'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('Paper type already exists', response.data['error'])
        response = self.client.get('/api/v1/paper-types/')
        self.assertEqual([p['name'] for p in response.data['data']], ['Maplitho'])
        self.assertEqual(PaperType.objects.count(), 1)
