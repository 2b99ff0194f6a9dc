"""
Test utilities and factories for creating test data
"""
import random
import string
from decimal import Decimal

from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from printshop.inventory.models import InventoryItem
from printshop.jobsheets.models import JobSheet, PaperType
from printshop.machines.models import Machine
from printshop.parties import ledger
from printshop.parties.models import Party

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='operator',
                    display_name='', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            display_name=display_name,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(**kwargs):
        kwargs.setdefault('role', 'admin')
        return TestDataFactory.create_user(**kwargs)

    @staticmethod
    def create_party(name=None, balance=None, **kwargs):
        """Create a party; a balance is posted through the ledger as an opening balance"""
        if not name:
            name = f'Party_{TestDataFactory.random_string(6)}'
        kwargs.setdefault('phone', '9876543210')
        party = Party.objects.create(name=name, **kwargs)
        if balance:
            ledger.post_opening_balance(party.id, balance)
            party.refresh_from_db()
        return party

    @staticmethod
    def create_paper_type(name=None, gsm=130):
        if not name:
            name = f'Art Paper {TestDataFactory.random_string(4)}'
        return PaperType.objects.create(name=name, gsm=gsm)

    @staticmethod
    def create_machine(name=None, status='active', operator_email='', **kwargs):
        """Create a test machine"""
        if not name:
            name = f'Machine_{TestDataFactory.random_string(6)}'
        kwargs.setdefault('type', 'offset')
        kwargs.setdefault('color_capacity', 4)
        return Machine.objects.create(name=name, status=status, operator_email=operator_email, **kwargs)

    @staticmethod
    def create_inventory_item(party=None, paper_type=None, gsm=130, current_quantity=0):
        party = party or TestDataFactory.create_party()
        paper_type = paper_type or TestDataFactory.create_paper_type(gsm=gsm)
        return InventoryItem.objects.create(
            party=party,
            paper_type=paper_type,
            paper_type_name=paper_type.name,
            gsm=gsm,
            current_quantity=current_quantity,
        )

    @staticmethod
    def create_job_sheet(party=None, machine=None, job_status='pending', **kwargs):
        """Create a job sheet row directly, without billing the party"""
        kwargs.setdefault('description', 'Visiting cards')
        kwargs.setdefault('printing', Decimal('500.00'))
        return JobSheet.objects.create(
            party=party,
            party_name=party.name if party else '',
            machine=machine,
            job_status=job_status,
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
