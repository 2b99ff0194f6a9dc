"""
Operator workflow for job sheets on machines.

    pending -> assigned -> in_progress -> completed

`cancelled` can be reached from any non-terminal status. Timestamps are
stamped once, the first time a job enters the matching status. Every
status change notifies the operator of the job's machine.
"""
import logging

from django.db import transaction
from django.db.models import Count, Q
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from printshop.jobsheets.models import JobSheet
from printshop.notifications.services import notify_operator
from .models import Machine

logger = logging.getLogger(__name__)

JOB_STATUSES = ('pending', 'assigned', 'in_progress', 'completed', 'cancelled')
TERMINAL_STATUSES = ('completed', 'cancelled')
ACTIVE_STATUSES = ('assigned', 'in_progress')

ALLOWED_TRANSITIONS = {
    'pending': {'assigned', 'cancelled'},
    'assigned': {'in_progress', 'cancelled'},
    'in_progress': {'completed', 'cancelled'},
    'completed': set(),
    'cancelled': set(),
}

TIMESTAMP_FIELDS = {
    'assigned': 'assigned_at',
    'in_progress': 'started_at',
    'completed': 'completed_at',
}

OPERATOR_ACTIONS = {
    'start': ('in_progress', 'Can only start assigned jobs'),
    'complete': ('completed', 'Can only complete jobs that are in progress'),
    'cancel': ('cancelled', 'Cannot cancel completed or already cancelled jobs'),
}


def validate_transition(current, new):
    """Raise a 400 unless `current -> new` is allowed. Same status is a no-op."""
    if new not in JOB_STATUSES:
        raise ValidationError('Invalid job status')
    if current == new:
        return
    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise ValidationError(f"Cannot change job status from {current} to {new}")


def apply_status(job, new_status, operator_notes=None):
    """
    Move `job` to `new_status`, stamping its timestamp if not yet set, and
    save. Notes are replaced when given. Returns True if the status changed.
    """
    validate_transition(job.job_status, new_status)
    update_fields = ['updated_at']
    changed = job.job_status != new_status

    if changed:
        job.job_status = new_status
        update_fields.append('job_status')
        stamp_field = TIMESTAMP_FIELDS.get(new_status)
        if stamp_field and getattr(job, stamp_field) is None:
            setattr(job, stamp_field, timezone.now())
            update_fields.append(stamp_field)

    if operator_notes is not None:
        job.operator_notes = operator_notes
        update_fields.append('operator_notes')

    job.save(update_fields=update_fields)
    return changed


def _lock_job(job_id, machine_id=None):
    jobs = JobSheet.objects.select_for_update().filter(pk=job_id, is_deleted=False)
    if machine_id is not None:
        jobs = jobs.filter(machine_id=machine_id)
    return jobs.first()


def _notify_status(job, operator_notes=None):
    if job.machine_id is None:
        return None
    message = f"Job #{job.id} status has been updated to {job.job_status}"
    if operator_notes:
        message += f" with notes: {operator_notes}"
    return notify_operator(
        job.machine,
        'job_status_update',
        f"Job Status Updated to {job.job_status}",
        message,
        job_sheet=job,
        data={
            'job_id': job.id,
            'new_status': job.job_status,
            'operator_notes': operator_notes,
            'updated_at': job.updated_at.isoformat() if job.updated_at else None,
        },
    )


def update_job_status(job_id, new_status, operator_notes=None):
    """Status update from the operator job list; notifies the machine's operator"""
    if new_status not in JOB_STATUSES:
        raise ValidationError('Invalid job status')

    with transaction.atomic():
        job = _lock_job(job_id)
        if job is None:
            raise NotFound('Job not found')
        old_status = job.job_status
        apply_status(job, new_status, operator_notes)
        _notify_status(job, operator_notes)

    logger.info(f"Job {job.id} status {old_status} -> {job.job_status}")
    return job


def perform_operator_action(machine_id, job_id, action, operator_notes=None):
    """Run an operator dashboard action (start, complete, cancel, update_notes)"""
    if action != 'update_notes' and action not in OPERATOR_ACTIONS:
        raise ValidationError('Invalid action')

    with transaction.atomic():
        job = _lock_job(job_id, machine_id=machine_id)
        if job is None:
            raise NotFound('Job not found or not assigned to this machine')

        if action == 'update_notes':
            apply_status(job, job.job_status, operator_notes)
            return job

        new_status, message = OPERATOR_ACTIONS[action]
        if new_status not in ALLOWED_TRANSITIONS[job.job_status]:
            raise ValidationError(message)
        apply_status(job, new_status, operator_notes)
        _notify_status(job, operator_notes)

    logger.info(f"Operator on machine {machine_id} ran '{action}' on job {job.id}")
    return job


def _ensure_accepting(machine, message):
    if machine.status != 'active':
        raise ValidationError(message.format(status=machine.status))


def assign_job(job_id, machine_id):
    """Put a pending job on an active machine"""
    with transaction.atomic():
        job = _lock_job(job_id)
        if job is None:
            raise NotFound('Job sheet not found')
        if job.machine_id and job.job_status != 'pending':
            raise ValidationError('Job is already assigned to a machine')

        machine = Machine.objects.filter(pk=machine_id).first()
        if machine is None:
            raise NotFound('Machine not found')
        _ensure_accepting(machine, 'Machine is currently {status} and cannot accept new jobs')

        job.machine = machine
        job.save(update_fields=['machine', 'updated_at'])
        apply_status(job, 'assigned')
        notify_operator(
            machine,
            'job_assignment',
            'New Job Assigned',
            f"Job #{job.id} ({job.description or 'Job order'}) has been assigned to {machine.name}",
            job_sheet=job,
            data={'job_id': job.id, 'machine_id': machine.id},
        )

    logger.info(f"Assigned job {job.id} to machine {machine.id}")
    return job, machine


def reassign_job(job_id, new_machine_id, reason=None, operator_notes=None):
    """Move an assigned (or pending) job to another active machine"""
    with transaction.atomic():
        job = _lock_job(job_id)
        if job is None:
            raise NotFound('Job sheet not found')
        if job.job_status == 'completed':
            raise ValidationError('Cannot reassign completed jobs')
        if job.job_status == 'in_progress':
            raise ValidationError('Cannot reassign jobs that are in progress')
        if job.job_status == 'cancelled':
            raise ValidationError('Cannot reassign cancelled jobs')

        machine = Machine.objects.filter(pk=new_machine_id).first()
        if machine is None:
            raise NotFound('New machine not found')
        _ensure_accepting(machine, 'New machine is currently {status} and cannot accept jobs')

        old_machine_id = job.machine_id
        notes = f"{job.operator_notes or ''}\n\nReassigned: {reason or 'No reason provided'}"
        if operator_notes:
            notes += f"\nNew notes: {operator_notes}"

        job.machine = machine
        job.job_status = 'assigned'
        job.assigned_at = timezone.now()
        job.started_at = None
        job.operator_notes = notes.strip()
        job.save(update_fields=['machine', 'job_status', 'assigned_at', 'started_at', 'operator_notes', 'updated_at'])
        notify_operator(
            machine,
            'job_reassignment',
            'Job Reassigned',
            f"Job #{job.id} has been reassigned to {machine.name}: {reason or 'No reason provided'}",
            job_sheet=job,
            data={'job_id': job.id, 'machine_id': machine.id, 'previous_machine_id': old_machine_id},
        )

    logger.info(f"Reassigned job {job.id} from machine {old_machine_id} to {machine.id}")
    return job, machine


def _job_counts(jobs):
    counts = jobs.aggregate(
        total_jobs=Count('id'),
        **{f"{s}_jobs": Count('id', filter=Q(job_status=s)) for s in JOB_STATUSES},
    )
    counts['active_jobs'] = counts['assigned_jobs'] + counts['in_progress_jobs']
    counts['completed_today'] = jobs.filter(
        job_status='completed', completed_at__date=timezone.localdate()).count()
    return counts


def machine_stats(machine):
    """Job counts per status for a machine, plus active and completed-today counts"""
    return _job_counts(JobSheet.objects.filter(machine=machine, is_deleted=False))


def workflow_stats():
    """Shop-wide job counts per status with machine availability"""
    stats = _job_counts(JobSheet.objects.filter(is_deleted=False))
    stats['unassigned_jobs'] = JobSheet.objects.filter(
        is_deleted=False, machine__isnull=True).exclude(job_status__in=TERMINAL_STATUSES).count()
    stats.update(Machine.objects.aggregate(
        total_machines=Count('id'),
        active_machines=Count('id', filter=Q(status='active')),
        available_machines=Count('id', filter=Q(status='active', is_available=True)),
    ))
    return stats


def job_workflow_status(job_id):
    """Where one job sheet is in the workflow"""
    job = JobSheet.objects.select_related('machine').filter(pk=job_id, is_deleted=False).first()
    if job is None:
        raise NotFound('Workflow status not found')
    return {
        'job_sheet_id': job.id,
        'status': job.job_status,
        'machine_id': job.machine_id,
        'machine_name': job.machine.name if job.machine else None,
        'assigned_at': job.assigned_at,
        'started_at': job.started_at,
        'completed_at': job.completed_at,
        'operator_notes': job.operator_notes,
        'updated_at': job.updated_at,
    }
