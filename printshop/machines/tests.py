"""
Test suite for machines and the operator workflow
Tests: status transitions, timestamps, assignment, operator actions, machine CRUD
"""
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound, ValidationError

from printshop.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from printshop.machines import workflow
from printshop.machines.models import Machine
from printshop.notifications.models import EmailNotification, OperatorNotification


class TransitionTests(TestCase):

    def test_allowed_path(self):
        for current, new in (('pending', 'assigned'), ('assigned', 'in_progress'),
                             ('in_progress', 'completed')):
            workflow.validate_transition(current, new)

    def test_cancel_from_any_open_status(self):
        for current in ('pending', 'assigned', 'in_progress'):
            workflow.validate_transition(current, 'cancelled')

    def test_rejected_transitions(self):
        for current, new in (('pending', 'completed'), ('completed', 'in_progress'),
                             ('cancelled', 'assigned'), ('in_progress', 'assigned')):
            with self.assertRaises(ValidationError):
                workflow.validate_transition(current, new)

    def test_unknown_status(self):
        with self.assertRaises(ValidationError):
            workflow.validate_transition('pending', 'paused')

    def test_same_status_allowed(self):
        workflow.validate_transition('completed', 'completed')


class WorkflowServiceTests(TestCase):

    def setUp(self):
        self.machine = TestDataFactory.create_machine(operator_email='op@example.com')
        self.job = TestDataFactory.create_job_sheet(machine=self.machine, job_status='assigned')

    def test_timestamps_stamped_once(self):
        job = workflow.update_job_status(self.job.id, 'in_progress')
        started_at = job.started_at
        self.assertIsNotNone(started_at)

        job = workflow.update_job_status(self.job.id, 'in_progress', operator_notes='Second colour done')
        self.assertEqual(job.started_at, started_at)
        self.assertEqual(job.operator_notes, 'Second colour done')

        job = workflow.update_job_status(self.job.id, 'completed')
        self.assertIsNotNone(job.completed_at)
        self.assertEqual(job.started_at, started_at)

    def test_status_update_notifies_operator(self):
        workflow.update_job_status(self.job.id, 'in_progress', operator_notes='Plates ready')
        notification = OperatorNotification.objects.get(type='job_status_update')
        self.assertEqual(notification.machine, self.machine)
        self.assertEqual(notification.title, 'Job Status Updated to in_progress')
        self.assertEqual(notification.message,
                         f'Job #{self.job.id} status has been updated to in_progress with notes: Plates ready')
        self.assertEqual(notification.data['new_status'], 'in_progress')
        email = EmailNotification.objects.get()
        self.assertEqual(email.to_email, 'op@example.com')
        self.assertEqual(email.status, 'pending')

    def test_no_email_without_operator_email(self):
        self.machine.operator_email = ''
        self.machine.save()
        workflow.update_job_status(self.job.id, 'in_progress')
        self.assertEqual(OperatorNotification.objects.count(), 1)
        self.assertFalse(EmailNotification.objects.exists())

    def test_disallowed_transition_leaves_job_unchanged(self):
        with self.assertRaises(ValidationError):
            workflow.update_job_status(self.job.id, 'completed')
        self.job.refresh_from_db()
        self.assertEqual(self.job.job_status, 'assigned')
        self.assertFalse(OperatorNotification.objects.exists())

    def test_operator_actions(self):
        with self.assertRaises(ValidationError):
            workflow.perform_operator_action(self.machine.id, self.job.id, 'complete')
        job = workflow.perform_operator_action(self.machine.id, self.job.id, 'start')
        self.assertEqual(job.job_status, 'in_progress')
        job = workflow.perform_operator_action(self.machine.id, self.job.id, 'complete')
        self.assertEqual(job.job_status, 'completed')
        with self.assertRaises(ValidationError):
            workflow.perform_operator_action(self.machine.id, self.job.id, 'cancel')

    def test_operator_action_on_other_machine(self):
        other = TestDataFactory.create_machine()
        with self.assertRaises(NotFound):
            workflow.perform_operator_action(other.id, self.job.id, 'start')

    def test_update_notes_keeps_status(self):
        job = workflow.perform_operator_action(self.machine.id, self.job.id, 'update_notes', 'Waiting for ink')
        self.assertEqual(job.job_status, 'assigned')
        self.assertEqual(job.operator_notes, 'Waiting for ink')

    def test_assign_pending_job(self):
        job = TestDataFactory.create_job_sheet()
        job, machine = workflow.assign_job(job.id, self.machine.id)
        self.assertEqual(job.job_status, 'assigned')
        self.assertEqual(job.machine_id, self.machine.id)
        self.assertIsNotNone(job.assigned_at)
        self.assertTrue(OperatorNotification.objects.filter(type='job_assignment').exists())

    def test_assign_rejects_busy_job_and_inactive_machine(self):
        with self.assertRaises(ValidationError):
            workflow.assign_job(self.job.id, self.machine.id)
        offline = TestDataFactory.create_machine(status='maintenance')
        job = TestDataFactory.create_job_sheet()
        with self.assertRaises(ValidationError):
            workflow.assign_job(job.id, offline.id)

    def test_reassign(self):
        other = TestDataFactory.create_machine()
        job, machine = workflow.reassign_job(self.job.id, other.id, reason='Machine jammed')
        self.assertEqual(job.machine_id, other.id)
        self.assertEqual(job.job_status, 'assigned')
        self.assertIsNone(job.started_at)
        self.assertIn('Reassigned: Machine jammed', job.operator_notes)

    def test_reassign_in_progress_rejected(self):
        workflow.update_job_status(self.job.id, 'in_progress')
        other = TestDataFactory.create_machine()
        with self.assertRaises(ValidationError):
            workflow.reassign_job(self.job.id, other.id)

    def test_machine_stats(self):
        TestDataFactory.create_job_sheet(machine=self.machine, job_status='in_progress')
        TestDataFactory.create_job_sheet(machine=self.machine, job_status='cancelled')
        stats = workflow.machine_stats(self.machine)
        self.assertEqual(stats['total_jobs'], 3)
        self.assertEqual(stats['assigned_jobs'], 1)
        self.assertEqual(stats['in_progress_jobs'], 1)
        self.assertEqual(stats['cancelled_jobs'], 1)
        self.assertEqual(stats['active_jobs'], 2)
        self.assertEqual(stats['completed_today'], 0)

    def test_workflow_stats(self):
        TestDataFactory.create_job_sheet(job_status='pending')
        TestDataFactory.create_job_sheet(job_status='completed', is_deleted=True)
        TestDataFactory.create_machine(status='maintenance')
        stats = workflow.workflow_stats()
        self.assertEqual(stats['total_jobs'], 2)
        self.assertEqual(stats['pending_jobs'], 1)
        self.assertEqual(stats['active_jobs'], 1)
        self.assertEqual(stats['unassigned_jobs'], 1)
        self.assertEqual((stats['total_machines'], stats['active_machines']), (2, 1))

    def test_job_workflow_status(self):
        info = workflow.job_workflow_status(self.job.id)
        self.assertEqual(info['status'], 'assigned')
        self.assertEqual(info['machine_name'], self.machine.name)
        with self.assertRaises(NotFound):
            workflow.job_workflow_status(999999)


class MachineAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create(self):
        response = self.client.post('/api/v1/machines/', {
            'name': 'Heidelberg SM74', 'type': 'offset', 'color_capacity': 4,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['message'], 'Machine created successfully')

    def test_duplicate_name_rejected(self):
        TestDataFactory.create_machine(name='Komori')
        response = self.client.post('/api/v1/machines/', {'name': 'Komori', 'type': 'offset', 'color_capacity': 2})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Machine name already exists')
        self.assertEqual(Machine.objects.filter(name='Komori').count(), 1)

    def test_missing_color_capacity(self):
        response = self.client.post('/api/v1/machines/', {'name': 'Ryobi', 'type': 'offset'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Name, type, and color capacity are required')
        self.assertFalse(Machine.objects.exists())

    def test_update_by_body_id(self):
        machine = TestDataFactory.create_machine(name='Old Name')
        response = self.client.put('/api/v1/machines/', {'id': machine.id, 'status': 'maintenance'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        machine.refresh_from_db()
        self.assertEqual(machine.status, 'maintenance')

    def test_delete_blocked_by_active_jobs(self):
        machine = TestDataFactory.create_machine()
        TestDataFactory.create_job_sheet(machine=machine, job_status='in_progress')
        response = self.client.delete(f'/api/v1/machines/?id={machine.id}')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Cannot delete machine with active job assignments')
        self.assertTrue(Machine.objects.filter(pk=machine.id).exists())

    def test_delete(self):
        machine = TestDataFactory.create_machine()
        TestDataFactory.create_job_sheet(machine=machine, job_status='completed')
        response = self.client.delete(f'/api/v1/machines/?id={machine.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Machine.objects.filter(pk=machine.id).exists())

    def test_assign_and_operator_dashboard(self):
        machine = TestDataFactory.create_machine(name='Press 1')
        job = TestDataFactory.create_job_sheet()
        response = self.client.post('/api/v1/machines/assign-job/', {'job_sheet_id': job.id, 'machine_id': machine.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Job assigned to Press 1 successfully')

        response = self.client.get(f'/api/v1/machines/{machine.id}/operator/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([j['id'] for j in response.data['data']['assigned_jobs']], [job.id])
        self.assertEqual(response.data['data']['stats']['active_jobs'], 1)

        response = self.client.post(f'/api/v1/machines/{machine.id}/operator/',
                                    {'job_sheet_id': job.id, 'action': 'start'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['message'], 'Job started successfully')

    def test_assign_missing_fields(self):
        response = self.client.post('/api/v1/machines/assign-job/', {'job_sheet_id': 1})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Job sheet ID and machine ID are required')

    def test_assign_non_numeric_ids(self):
        machine = TestDataFactory.create_machine()
        job = TestDataFactory.create_job_sheet()

        response = self.client.post('/api/v1/machines/assign-job/', {'job_sheet_id': 'abc', 'machine_id': machine.id})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid job sheet ID')

        response = self.client.post('/api/v1/machines/assign-job/', {'job_sheet_id': job.id, 'machine_id': 'x1'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid machine ID')

        response = self.client.put('/api/v1/machines/assign-job/', {'job_sheet_id': job.id, 'new_machine_id': 'x1'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid machine ID')

        response = self.client.post(f'/api/v1/machines/{machine.id}/operator/',
                                    {'job_sheet_id': 'abc', 'action': 'start'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid job sheet ID')

        job.refresh_from_db()
        self.assertEqual(job.job_status, 'pending')

    def test_operator_invalid_action(self):
        machine = TestDataFactory.create_machine()
        job = TestDataFactory.create_job_sheet(machine=machine, job_status='assigned')
        response = self.client.post(f'/api/v1/machines/{machine.id}/operator/',
                                    {'job_sheet_id': job.id, 'action': 'pause'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid action')

    def test_jobs_endpoint(self):
        machine = TestDataFactory.create_machine()
        job = TestDataFactory.create_job_sheet(machine=machine, job_status='assigned')

        response = self.client.get('/api/v1/jobs/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Machine ID is required')

        response = self.client.get(f'/api/v1/jobs/?machine_id={machine.id}&status=assigned')
        self.assertEqual([j['id'] for j in response.data['data']['jobs']], [job.id])

        response = self.client.put(f'/api/v1/jobs/?job_id={job.id}', {'job_status': 'finished'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid job status')

        response = self.client.put(f'/api/v1/jobs/?job_id={job.id}', {'job_status': 'in_progress'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['job_status'], 'in_progress')
        self.assertTrue(OperatorNotification.objects.filter(machine=machine, type='job_status_update').exists())


class WorkflowAPITests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(TestDataFactory.create_user())
        self.machine = TestDataFactory.create_machine(name='Press 1')
        TestDataFactory.create_machine(name='Press 2', status='offline')
        self.job = TestDataFactory.create_job_sheet(machine=self.machine, job_status='in_progress')
        TestDataFactory.create_job_sheet(job_status='completed')

    def test_overview(self):
        low = TestDataFactory.create_inventory_item(current_quantity=40)
        TestDataFactory.create_inventory_item(current_quantity=50000)
        TestDataFactory.create_inventory_item(current_quantity=-10)

        response = self.client.get('/api/v1/workflow/?action=overview')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.data['data']
        self.assertEqual([j['id'] for j in data['active_jobs']], [self.job.id])
        self.assertEqual([m['name'] for m in data['machine_status']], ['Press 1'])
        self.assertEqual([i['id'] for i in data['low_inventory']], [low.id])

    def test_stats(self):
        response = self.client.get('/api/v1/workflow/?action=stats')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['in_progress_jobs'], 1)
        self.assertEqual(response.data['data']['completed_jobs'], 1)

    def test_job_status(self):
        response = self.client.get(f'/api/v1/workflow/?action=status&jobSheetId={self.job.id}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['data']['status'], 'in_progress')
        self.assertEqual(response.data['data']['machine_name'], 'Press 1')

        response = self.client.get('/api/v1/workflow/?action=status&jobSheetId=999999')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['error'], 'Workflow status not found')

        response = self.client.get('/api/v1/workflow/?action=status&jobSheetId=abc')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_recent_activity_and_unknown_action(self):
        response = self.client.get('/api/v1/workflow/')
        self.assertEqual(len(response.data['data']), 2)

        response = self.client.get('/api/v1/workflow/?action=explode')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid action')
