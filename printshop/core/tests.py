"""
Test suite for authentication, account setup and audit logs
"""
from io import StringIO

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.management import call_command
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from printshop.core.exceptions import error_message
from printshop.core.models import AuditLog
from printshop.core.permissions import is_admin_user
from printshop.core.rate_limit import RateLimiter
from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient

User = get_user_model()


class ErrorMessageTests(TestCase):

    def test_prefixes_field_name(self):
        self.assertEqual(error_message({'gsm': ['A valid integer is required.']}),
                         'gsm: A valid integer is required.')

    def test_no_prefix_when_message_names_field(self):
        self.assertEqual(error_message({'party_id': ['Party ID is required']}), 'Party ID is required')

    def test_non_field_errors(self):
        self.assertEqual(error_message({'non_field_errors': ['Amount must be positive']}), 'Amount must be positive')

    def test_plain_detail(self):
        self.assertEqual(error_message(['Job not found']), 'Job not found')


class PermissionTests(TestCase):

    def test_roles(self):
        self.assertTrue(is_admin_user(TestDataFactory.create_admin()))
        self.assertTrue(is_admin_user(TestDataFactory.create_user(role='supervisor')))
        self.assertTrue(is_admin_user(TestDataFactory.create_user(is_staff=True)))
        self.assertFalse(is_admin_user(TestDataFactory.create_user()))


class RateLimiterTests(TestCase):

    def setUp(self):
        cache.clear()

    def test_blocks_after_max_attempts(self):
        limiter = RateLimiter(max_attempts=2, window=60, prefix='test')
        self.assertTrue(limiter.is_allowed('10.0.0.1'))
        self.assertTrue(limiter.is_allowed('10.0.0.1'))
        self.assertFalse(limiter.is_allowed('10.0.0.1'))
        self.assertTrue(limiter.is_allowed('10.0.0.2'))
        limiter.reset('10.0.0.1')
        self.assertEqual(limiter.remaining('10.0.0.1'), 2)


class LoginTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.user = TestDataFactory.create_user(username='guddu', display_name='Guddu')

    def test_login(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'guddu', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertIn('access', response.data['data'])
        self.assertEqual(response.data['data']['user']['username'], 'guddu')
        self.assertTrue(AuditLog.objects.filter(action='login', user=self.user).exists())

    def test_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {'username': 'guddu', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(response.data['success'])
        self.assertIn('error', response.data)

    def test_rate_limited(self):
        for _ in range(5):
            self.client.post('/api/v1/auth/login/', {'username': 'guddu', 'password': 'nope'})
        response = self.client.post('/api/v1/auth/login/', {'username': 'guddu', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_429_TOO_MANY_REQUESTS)
        self.assertEqual(response.data['error'], 'Too many login attempts. Please try again later.')

    def test_me(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

        client = AuthenticatedAPIClient()
        client.authenticate_user(self.user)
        response = client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['name'], 'Guddu')
        self.assertFalse(response.data['data']['is_admin'])


@override_settings(ADMIN_PASSCODE='4321', ADMIN_USERNAME='admin')
class AdminCookieTests(TestCase):

    def setUp(self):
        cache.clear()
        self.client = APIClient()
        TestDataFactory.create_admin(username='admin')

    def test_passcode_required(self):
        response = self.client.post('/api/v1/auth/admin-login/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Passcode is required')

    def test_wrong_passcode(self):
        response = self.client.post('/api/v1/auth/admin-login/', {'passcode': '0000'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid passcode')

    def test_cookie_authenticates_admin(self):
        response = self.client.post('/api/v1/auth/admin-login/', {'passcode': '4321'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('admin-auth', response.cookies)

        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['username'], 'admin')
        self.assertTrue(response.data['data']['is_admin'])

        self.client.post('/api/v1/auth/admin-logout/')
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_tampered_cookie_ignored(self):
        self.client.cookies['admin-auth'] = 'true'
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)


@override_settings(SETUP_SECRET='setup-secret', OPERATOR_DEFAULT_PASSWORD='Welcome@123', DEBUG=False)
class SetupUsersTests(TestCase):

    def setUp(self):
        self.client = APIClient()

    def test_list_accounts(self):
        response = self.client.get('/api/v1/auth/setup-users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        usernames = [u['username'] for u in response.data['data']['users']]
        self.assertEqual(usernames, ['admin', 'supervisor', 'guddu', 'dwarika'])
        self.assertNotIn('password', response.data['data']['users'][0])

    def test_setup_requires_secret(self):
        response = self.client.post('/api/v1/auth/setup-users/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(User.objects.exists())

    def test_setup_creates_then_updates(self):
        response = self.client.post('/api/v1/auth/setup-users/', HTTP_AUTHORIZATION='Bearer setup-secret')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['summary'],
                         {'total': 4, 'created': 4, 'updated': 0, 'errors': 0})
        guddu = User.objects.get(username='guddu')
        self.assertEqual(guddu.role, 'operator')
        self.assertTrue(guddu.groups.filter(name='Operator').exists())
        self.assertTrue(User.objects.get(username='admin').is_staff)

        response = self.client.post('/api/v1/auth/setup-users/', HTTP_AUTHORIZATION='Bearer setup-secret')
        self.assertEqual(response.data['data']['summary']['updated'], 4)

    def test_management_command(self):
        out = StringIO()
        call_command('setup_operators', '--password', 'Another@123', stdout=out)
        self.assertIn('4 created', out.getvalue())
        self.assertTrue(User.objects.get(username='dwarika').check_password('Another@123'))


class AuditLogAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        AuditLog.objects.create(action='create', model_name='Party', object_id='1', object_name='Sharma Prints')
        AuditLog.objects.create(action='delete', model_name='Machine', object_id='2')

    def test_requires_admin(self):
        self.client.authenticate_user(TestDataFactory.create_user())
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Admin access required')

    def test_filters(self):
        self.client.authenticate_user(TestDataFactory.create_admin())
        response = self.client.get('/api/v1/audit-logs/?model=Party')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['object_name'] for log in response.data['data']], ['Sharma Prints'])
