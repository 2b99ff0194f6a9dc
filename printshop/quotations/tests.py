"""
Test suite for quotation requests
Tests: public submission, rate limiting, staff updates, notes, invoice numbering
"""
import uuid
from datetime import date
from decimal import Decimal
from unittest import mock

from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from printshop.core.exceptions import ConflictError
from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.quotations import services
from printshop.quotations.models import QuotationRequest


def quotation_payload(**overrides):
    payload = {
        'client_name': 'Anita Rao',
        'client_email': 'anita@example.com',
        'client_phone': '9811122233',
        'project_title': 'Annual report 2026',
        'print_type': 'offset',
        'paper_type': 'art paper',
        'paper_size': 'A4',
        'quantity': 500,
        'pages': 48,
        'color_type': 'full color',
        'binding_type': 'perfect',
    }
    payload.update(overrides)
    return payload


def create_quotation(**overrides):
    return QuotationRequest.objects.create(**quotation_payload(**overrides))


class InvoiceServiceTests(TestCase):

    def test_numbers_are_sequential_per_month(self):
        first = services.generate_invoice(create_quotation().id)
        second = services.generate_invoice(create_quotation().id)
        prefix = f"INV-{first.invoice_date:%Y%m}-"
        self.assertEqual(first.invoice_number, f'{prefix}0001')
        self.assertEqual(second.invoice_number, f'{prefix}0002')

    def test_new_month_starts_over(self):
        create_quotation(invoice_number='INV-202609-0007')
        self.assertEqual(services.next_invoice_number(date(2026, 9, 30)), 'INV-202609-0008')
        self.assertEqual(services.next_invoice_number(date(2026, 10, 1)), 'INV-202610-0001')

    def test_sequence_past_9999(self):
        create_quotation(invoice_number='INV-202609-9999')
        create_quotation(invoice_number='INV-202609-0100')
        self.assertEqual(services.next_invoice_number(date(2026, 9, 30)), 'INV-202609-10000')

        create_quotation(invoice_number='INV-202609-10000')
        self.assertEqual(services.next_invoice_number(date(2026, 9, 30)), 'INV-202609-10001')

    def test_taken_number_is_retried(self):
        taken = create_quotation(invoice_number='INV-202609-0001')
        quotation = create_quotation()
        with mock.patch('printshop.quotations.services.next_invoice_number',
                        side_effect=['INV-202609-0001', 'INV-202609-0002']):
            quotation = services.generate_invoice(quotation.id)
        self.assertEqual(quotation.invoice_number, 'INV-202609-0002')
        taken.refresh_from_db()
        self.assertEqual(taken.invoice_number, 'INV-202609-0001')

    def test_gives_up_after_repeated_collisions(self):
        create_quotation(invoice_number='INV-202609-0001')
        quotation = create_quotation()
        with mock.patch('printshop.quotations.services.next_invoice_number', return_value='INV-202609-0001'):
            with self.assertRaises(ConflictError):
                services.generate_invoice(quotation.id)
        quotation.refresh_from_db()
        self.assertIsNone(quotation.invoice_number)

    def test_invoice_generated_once(self):
        quotation = services.generate_invoice(create_quotation().id)
        with self.assertRaises(ConflictError):
            services.generate_invoice(quotation.id)


class QuotationSubmissionTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_public_submission(self):
        response = self.client.post('/api/v1/quotations/', quotation_payload())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'],
                         "Quotation request submitted successfully. We'll contact you with a quote soon.")
        self.assertEqual(response.data['data']['status'], 'pending')
        self.assertIsNone(response.data['data']['invoice_number'])

    def test_client_cannot_set_price(self):
        response = self.client.post('/api/v1/quotations/', quotation_payload(final_price='1.00', status='approved'))
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        quotation = QuotationRequest.objects.get()
        self.assertIsNone(quotation.final_price)
        self.assertEqual(quotation.status, 'pending')

    def test_missing_fields(self):
        payload = quotation_payload()
        del payload['client_email']
        del payload['quantity']
        response = self.client.post('/api/v1/quotations/', payload)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing required fields: client_email, quantity')
        self.assertFalse(QuotationRequest.objects.exists())

    def test_rate_limited(self):
        with mock.patch('printshop.quotations.views.submission_limiter.max_attempts', 2):
            for _ in range(2):
                self.assertEqual(self.client.post('/api/v1/quotations/', quotation_payload()).status_code,
                                 status.HTTP_201_CREATED)
            response = self.client.post('/api/v1/quotations/', quotation_payload())
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response.data['error'], 'Too many requests. Please try again later.')
        self.assertEqual(QuotationRequest.objects.count(), 2)

    def test_list_requires_login(self):
        response = self.client.get('/api/v1/quotations/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


class QuotationStaffTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(display_name='Supervisor')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.quotation = create_quotation()
        self.url = f'/api/v1/quotations/{self.quotation.id}/'

    def test_list_by_status(self):
        create_quotation(status='approved')
        response = self.client.get('/api/v1/quotations/?status=approved')
        self.assertEqual([q['status'] for q in response.data['data']], ['approved'])

    def test_update_status_and_price(self):
        response = self.client.patch(self.url, {'status': 'quoted', 'estimated_price': '12500.00'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.quotation.refresh_from_db()
        self.assertEqual(self.quotation.status, 'quoted')
        self.assertEqual(self.quotation.estimated_price, Decimal('12500.00'))

    def test_invalid_status(self):
        response = self.client.patch(self.url, {'status': 'shipped'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid quotation status')

    def test_empty_update(self):
        response = self.client.patch(self.url, {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Nothing to update')

    def test_unknown_quotation(self):
        response = self.client.get(f'/api/v1/quotations/{uuid.uuid4()}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Quotation not found')

    def test_notes(self):
        response = self.client.post(f'{self.url}notes/', {'note': 'Client wants matte cover'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['data']['created_by'], 'Supervisor')

        response = self.client.post(f'{self.url}notes/', {'note': ''})
        self.assertEqual(response.data['error'], 'Note is required')

        response = self.client.get(self.url)
        self.assertEqual([n['note'] for n in response.data['data']['notes']], ['Client wants matte cover'])

    def test_invoice_endpoint(self):
        response = self.client.post(f'{self.url}invoice/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['data']['invoice_number'].startswith('INV-'))

        response = self.client.post(f'{self.url}invoice/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invoice already generated for this quotation')

    def test_delete_requires_admin(self):
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.delete(self.url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(QuotationRequest.objects.exists())
