"""
Test suite for operator notifications
Tests: notify_operator, mail API client, email worker, notification endpoints
"""
from datetime import timedelta
from io import StringIO
from unittest import mock

import requests
from django.core.management import call_command
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.notifications import mailer, services
from printshop.notifications.models import EmailNotification, OperatorNotification
from printshop.notifications.worker import claim_pending_emails, process_pending_emails

MAIL_SETTINGS = {
    'MAIL_API_URL': 'https://mail.example.com/send',
    'MAIL_API_KEY': 'key-123',
    'MAIL_FROM': 'portal@example.com',
    'EMAIL_WORKER_DELAY_SECONDS': 0,
}


def mail_response(status_code=200, text='ok'):
    response = mock.Mock()
    response.status_code = status_code
    response.text = text
    return response


class NotifyOperatorTests(TestCase):

    def test_queues_email_when_operator_email_set(self):
        machine = TestDataFactory.create_machine(name='Press 2', operator_email='op@example.com')
        job = TestDataFactory.create_job_sheet(machine=machine)
        notification = services.notify_operator(machine, 'general', 'Ink delivery', 'Cyan arrives at 3pm',
                                                job_sheet=job)
        email = EmailNotification.objects.get()
        self.assertEqual(email.notification, notification)
        self.assertEqual(email.subject, 'Ink delivery')
        self.assertIn('Cyan arrives at 3pm', email.html_content)
        self.assertIn(f'Job Sheet #{job.id}', email.text_content)

    def test_no_email_without_operator_email(self):
        machine = TestDataFactory.create_machine()
        services.notify_operator(machine, 'general', 'Hello', 'World')
        self.assertEqual(OperatorNotification.objects.count(), 1)
        self.assertFalse(EmailNotification.objects.exists())


@override_settings(**MAIL_SETTINGS)
class MailerTests(TestCase):

    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_send(self, post):
        post.return_value = mail_response()
        ok, error = mailer.send_email('op@example.com', 'Subject', '<p>Hi</p>', 'Hi')
        self.assertTrue(ok)
        self.assertIsNone(error)
        kwargs = post.call_args[1]
        self.assertEqual(kwargs['json']['to'], 'op@example.com')
        self.assertEqual(kwargs['json']['from'], 'portal@example.com')
        self.assertEqual(kwargs['json']['text'], 'Hi')
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer key-123')

    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_error_status(self, post):
        post.return_value = mail_response(500, 'server error')
        ok, error = mailer.send_email('op@example.com', 'Subject', '<p>Hi</p>')
        self.assertFalse(ok)
        self.assertIn('500', error)

    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_network_error(self, post):
        post.side_effect = requests.ConnectionError('refused')
        ok, error = mailer.send_email('op@example.com', 'Subject', '<p>Hi</p>')
        self.assertFalse(ok)
        self.assertEqual(error, 'refused')

    @override_settings(MAIL_API_URL='')
    def test_not_configured(self):
        self.assertEqual(mailer.send_email('op@example.com', 's', 'h'), (False, 'Email service not configured'))


@override_settings(**MAIL_SETTINGS)
class EmailWorkerTests(TestCase):

    def _queue(self, to_email='op@example.com'):
        return services.queue_email(to_email, 'Job Assigned', '<p>Job</p>')

    def test_nothing_pending(self):
        self.assertEqual(process_pending_emails(), {'message': 'No pending emails', 'processed': 0})

    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_counts_success_and_failure(self, post):
        good = self._queue('good@example.com')
        bad = self._queue('bad@example.com')
        post.side_effect = [mail_response(), mail_response(422, 'invalid address')]

        result = process_pending_emails()
        self.assertEqual(result, {'message': 'Processed 2 emails', 'success': 1, 'failed': 1, 'total': 2})

        good.refresh_from_db()
        bad.refresh_from_db()
        self.assertEqual(good.status, 'sent')
        self.assertIsNotNone(good.sent_at)
        self.assertEqual(bad.status, 'failed')
        self.assertIn('422', bad.error_message)
        self.assertEqual(bad.attempts, 1)

    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_respects_limit(self, post):
        post.return_value = mail_response()
        for _ in range(3):
            self._queue()
        result = process_pending_emails(limit=2)
        self.assertEqual(result['total'], 2)
        self.assertEqual(EmailNotification.objects.filter(status='pending').count(), 1)

    def test_claimed_emails_are_not_handed_out_twice(self):
        first = self._queue()
        second = self._queue()

        claimed = claim_pending_emails(1)
        self.assertEqual([e.id for e in claimed], [first.id])
        self.assertEqual(claimed[0].status, 'sending')
        self.assertIsNotNone(claimed[0].claimed_at)

        self.assertEqual([e.id for e in claim_pending_emails(10)], [second.id])
        self.assertEqual(claim_pending_emails(10), [])
        self.assertEqual(process_pending_emails(), {'message': 'No pending emails', 'processed': 0})

    @override_settings(EMAIL_WORKER_CLAIM_TIMEOUT_SECONDS=60)
    def test_stale_claim_is_taken_over(self):
        email = self._queue()
        EmailNotification.objects.filter(pk=email.pk).update(
            status='sending', claimed_at=timezone.now() - timedelta(minutes=5))
        fresh = self._queue()
        EmailNotification.objects.filter(pk=fresh.pk).update(status='sending', claimed_at=timezone.now())

        self.assertEqual([e.id for e in claim_pending_emails(10)], [email.id])

    @override_settings(CRON_SECRET='cron-secret', EMAIL_WORKER_TOKEN='worker-token')
    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_endpoint_secrets(self, post):
        post.return_value = mail_response()
        self._queue()
        client = APIClient()

        response = client.post('/api/v1/email-worker/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Unauthorized')

        response = client.get('/api/v1/email-worker/?token=wrong')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid token')

        response = client.post('/api/v1/email-worker/', HTTP_AUTHORIZATION='Bearer cron-secret')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['success'], 1)

        response = client.get('/api/v1/email-worker/?token=worker-token')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'No pending emails')

    @mock.patch('printshop.notifications.mailer.requests.post')
    def test_management_command(self, post):
        post.return_value = mail_response()
        self._queue()
        out = StringIO()
        call_command('run_email_worker', '--limit', '5', stdout=out)
        self.assertIn('Processed 1 emails', out.getvalue())
        self.assertEqual(EmailNotification.objects.get().status, 'sent')


class NotificationAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.machine = TestDataFactory.create_machine()
        self.first = services.notify_operator(self.machine, 'general', 'First', 'one')
        self.second = services.notify_operator(self.machine, 'general', 'Second', 'two')

    def test_requires_auth(self):
        self.client.logout()
        response = self.client.get(f'/api/v1/notifications/?machine_id={self.machine.id}')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_list(self):
        response = self.client.get('/api/v1/notifications/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Machine ID is required')

        response = self.client.get(f'/api/v1/notifications/?machine_id={self.machine.id}&limit=1')
        titles = [n['title'] for n in response.data['data']['notifications']]
        self.assertEqual(titles, ['Second'])

    def test_mark_one(self):
        url = f'/api/v1/notifications/?notification_id={self.first.id}'
        response = self.client.put(url, {'read': 'yes'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Read status must be a boolean')

        response = self.client.put(url, {'read': True})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.first.refresh_from_db()
        self.assertTrue(self.first.read)

        response = self.client.get(f'/api/v1/notifications/?machine_id={self.machine.id}&unread_only=true')
        self.assertEqual([n['title'] for n in response.data['data']['notifications']], ['Second'])

    def test_mark_missing(self):
        response = self.client.put('/api/v1/notifications/?notification_id=999999', {'read': True})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Notification not found')

    def test_mark_all(self):
        response = self.client.patch(f'/api/v1/notifications/?machine_id={self.machine.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data'], {'updated': 2})
        self.assertFalse(OperatorNotification.objects.filter(read=False).exists())
