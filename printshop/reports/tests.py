"""
Test suite for the dashboard reports
Tests: headline stats, revenue overview, monthly chart
"""
from decimal import Decimal

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.jobsheets.models import JobSheet
from printshop.reports.views import _month_start


class MonthStartTests(TestCase):

    def test_wraps_year(self):
        day = timezone.localdate().replace(year=2026, month=2, day=14)
        self.assertEqual(_month_start(day).isoformat(), '2026-02-01')
        self.assertEqual(_month_start(day, 3).isoformat(), '2025-11-01')
        self.assertEqual(_month_start(day, 14).isoformat(), '2024-12-01')


class DashboardTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())

        today = timezone.localdate()
        party = TestDataFactory.create_party(balance=Decimal('1000.00'))
        TestDataFactory.create_job_sheet(party=party, printing=Decimal('500.00'), uv=Decimal('100.00'),
                                         imp=1000, paper_sheet=250, job_date=today)
        TestDataFactory.create_job_sheet(party=party, printing=Decimal('300.00'), imp=500, paper_sheet=100,
                                         job_date=_month_start(today, 1))
        TestDataFactory.create_job_sheet(party=party, printing=Decimal('900.00'), imp=9000, is_deleted=True,
                                         job_date=today)

    def test_requires_auth(self):
        self.client.logout()
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_stats(self):
        response = self.client.get('/api/v1/dashboard/stats/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('max-age=60', response['Cache-Control'])

        data = response.data['data']
        self.assertEqual(data['totalJobSheets'], 2)
        self.assertEqual(data['totalParties'], 1)
        self.assertEqual(data['totalBalance'], Decimal('1000.00'))
        self.assertEqual(data['totalRevenue'], Decimal('900.00'))
        self.assertEqual(data['monthlyRevenue'], Decimal('600.00'))
        self.assertEqual(data['activeTransactions'], 1)
        self.assertEqual(data['totalImpressions'], 1500)

    def test_overview(self):
        response = self.client.get('/api/v1/dashboard/overview/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']

        revenue = data['revenue']
        self.assertEqual(revenue['jobSheets'], Decimal('900.00'))
        self.assertEqual(revenue['payments'], Decimal('1000.00'))
        self.assertEqual(revenue['total'], Decimal('1900.00'))
        self.assertEqual(revenue['thisMonth'], Decimal('600.00'))
        self.assertEqual(revenue['lastMonth'], Decimal('300.00'))
        self.assertEqual(revenue['growth'], Decimal('100.00'))
        self.assertEqual(revenue['avgOrderValue'], Decimal('950.00'))

        self.assertEqual(data['production'], {'totalJobSheets': 2, 'totalPaperSheets': 350, 'totalImpressions': 1500})
        self.assertEqual(data['recentActivity']['jobSheets'], 2)

        chart = data['chartData']
        self.assertEqual(len(chart), 12)
        self.assertEqual((chart[-1]['jobSheets'], chart[-1]['revenue']), (1, Decimal('600.00')))
        self.assertEqual((chart[-2]['jobSheets'], chart[-2]['revenue']), (1, Decimal('300.00')))
        self.assertEqual(chart[-1]['efficiency'], 600)
        self.assertEqual(chart[0]['jobSheets'], 0)

    def test_empty_dashboard(self):
        JobSheet.objects.all().delete()
        response = self.client.get('/api/v1/dashboard/overview/')
        self.assertEqual(response.data['data']['revenue']['growth'], 0)
        self.assertEqual(response.data['data']['revenue']['avgOrderValue'], Decimal('0.00'))
