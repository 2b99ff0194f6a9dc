import logging

from django.conf import settings
from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError, NotFound
from rest_framework.permissions import IsAuthenticated

from printshop.core.exceptions import ConflictError
from printshop.core.responses import success_response
from printshop.core.utils import create_audit_log
from printshop.inventory.models import InventoryItem
from printshop.inventory.serializers import InventoryItemSerializer
from printshop.jobsheets.models import JobSheet
from . import workflow
from .models import Machine
from .serializers import MachineSerializer, OperatorJobSerializer

logger = logging.getLogger(__name__)

DEFAULT_JOB_LIMIT = 50
RECENT_ACTIVITY_LIMIT = 20
LOW_INVENTORY_LIMIT = 10

ACTION_MESSAGES = {
    'start': 'Job started successfully',
    'complete': 'Job completed successfully',
    'cancel': 'Job cancelled successfully',
    'update_notes': 'Job notes updated successfully',
}


def _require_id(value, message):
    if value in (None, '') or not str(value).isdigit():
        raise ValidationError(message)
    return int(value)


def _get_machine(machine_id, message='Machine not found'):
    machine = Machine.objects.filter(pk=machine_id).first()
    if machine is None:
        raise NotFound(message)
    return machine


@api_view(['GET', 'POST', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def machine_list_create(request):
    """List, create, update (body id) or delete (?id=) machines"""
    if request.method == 'GET':
        machines = Machine.objects.all().order_by('-created_at', '-id')
        return success_response(MachineSerializer(machines, many=True).data)

    elif request.method == 'POST':
        if not request.data.get('name') or not request.data.get('type') or not request.data.get('color_capacity'):
            raise ValidationError('Name, type, and color capacity are required')
        serializer = MachineSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        machine = serializer.save()
        create_audit_log(request=request, action='create', model_name='Machine', object_id=machine.id,
                         object_name=machine.name)
        return success_response(MachineSerializer(machine).data, message='Machine created successfully',
                                status=status.HTTP_201_CREATED)

    elif request.method == 'PUT':
        machine = _get_machine(_require_id(request.data.get('id'), 'Machine ID is required'))
        serializer = MachineSerializer(machine, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        machine = serializer.save()
        create_audit_log(request=request, action='update', model_name='Machine', object_id=machine.id,
                         object_name=machine.name,
                         changes={k: v for k, v in request.data.items() if k in serializer.fields and k != 'id'})
        return success_response(MachineSerializer(machine).data, message='Machine updated successfully')

    else:  # DELETE
        machine = _get_machine(_require_id(request.query_params.get('id'), 'Machine ID is required'))
        if machine.job_sheets.filter(job_status__in=workflow.ACTIVE_STATUSES, is_deleted=False).exists():
            raise ConflictError('Cannot delete machine with active job assignments')
        machine_id, name = machine.id, machine.name
        machine.delete()
        create_audit_log(request=request, action='delete', model_name='Machine', object_id=machine_id,
                         object_name=name)
        return success_response(None, message='Machine deleted successfully')


@api_view(['POST', 'PUT'])
@permission_classes([IsAuthenticated])
def assign_job(request):
    """POST assigns a job sheet to a machine, PUT moves it to another machine"""
    if request.method == 'POST':
        job_id = request.data.get('job_sheet_id')
        machine_id = request.data.get('machine_id')
        if not job_id or not machine_id:
            raise ValidationError('Job sheet ID and machine ID are required')
        job, machine = workflow.assign_job(_require_id(job_id, 'Invalid job sheet ID'),
                                           _require_id(machine_id, 'Invalid machine ID'))
        create_audit_log(request=request, action='status_change', model_name='JobSheet', object_id=job.id,
                         object_name=str(job), changes={'machine_id': machine.id, 'job_status': job.job_status})
        return success_response(OperatorJobSerializer(job).data,
                                message=f"Job assigned to {machine.name} successfully")

    job_id = request.data.get('job_sheet_id')
    new_machine_id = request.data.get('new_machine_id')
    if not job_id or not new_machine_id:
        raise ValidationError('Job sheet ID and new machine ID are required')
    job, machine = workflow.reassign_job(
        _require_id(job_id, 'Invalid job sheet ID'),
        _require_id(new_machine_id, 'Invalid machine ID'),
        reason=request.data.get('reason'),
        operator_notes=request.data.get('operator_notes'),
    )
    create_audit_log(request=request, action='status_change', model_name='JobSheet', object_id=job.id,
                     object_name=str(job),
                     changes={'machine_id': machine.id, 'reason': request.data.get('reason')})
    return success_response(OperatorJobSerializer(job).data,
                            message=f"Job reassigned to {machine.name} successfully")


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def machine_operator(request, pk):
    """Operator dashboard for one machine, and operator job actions"""
    if request.method == 'GET':
        machine = _get_machine(pk)
        jobs = (JobSheet.objects.filter(machine=machine, is_deleted=False)
                .select_related('machine', 'paper_type').order_by('assigned_at', 'id'))
        today = timezone.localdate()
        return success_response({
            'machine': MachineSerializer(machine).data,
            'assigned_jobs': OperatorJobSerializer(jobs.filter(job_status='assigned'), many=True).data,
            'in_progress_jobs': OperatorJobSerializer(jobs.filter(job_status='in_progress'), many=True).data,
            'completed_today': OperatorJobSerializer(
                jobs.filter(job_status='completed', completed_at__date=today), many=True).data,
            'stats': workflow.machine_stats(machine),
        })

    job_id = request.data.get('job_sheet_id')
    action = request.data.get('action')
    if not job_id or not action:
        raise ValidationError('Machine ID, job sheet ID, and action are required')
    job_id = _require_id(job_id, 'Invalid job sheet ID')
    job = workflow.perform_operator_action(pk, job_id, action, request.data.get('operator_notes'))
    create_audit_log(request=request, action='status_change', model_name='JobSheet', object_id=job.id,
                     object_name=str(job), changes={'action': action, 'job_status': job.job_status})
    return success_response(OperatorJobSerializer(job).data, message=ACTION_MESSAGES[action])


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def operator_jobs(request):
    """
    GET ?machine_id=&status=&limit=  jobs on a machine
    PUT ?job_id=  {"job_status", "operator_notes"}  update a job's status
    """
    if request.method == 'GET':
        machine_id = _require_id(request.query_params.get('machine_id'), 'Machine ID is required')
        jobs = JobSheet.objects.filter(machine_id=machine_id, is_deleted=False).select_related('machine', 'paper_type')
        job_status = request.query_params.get('status')
        if job_status:
            jobs = jobs.filter(job_status=job_status)
        try:
            limit = int(request.query_params.get('limit', DEFAULT_JOB_LIMIT))
        except (TypeError, ValueError):
            limit = DEFAULT_JOB_LIMIT
        jobs = jobs.order_by('-assigned_at', '-id')[:max(limit, 1)]
        return success_response({'jobs': OperatorJobSerializer(jobs, many=True).data})

    job_id = _require_id(request.query_params.get('job_id'), 'Job ID is required')
    new_status = request.data.get('job_status')
    if not new_status:
        raise ValidationError('Job status is required')
    job = workflow.update_job_status(job_id, new_status, request.data.get('operator_notes'))
    create_audit_log(request=request, action='status_change', model_name='JobSheet', object_id=job.id,
                     object_name=str(job), changes={'job_status': job.job_status})
    return success_response(OperatorJobSerializer(job).data, message='Job updated successfully')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def workflow_overview(request):
    """
    GET ?action=overview                   active jobs, active machines, low stock alerts
    GET ?action=stats                      shop-wide job and machine counts
    GET ?action=status&jobSheetId=         one job's place in the workflow
    GET                                    most recently updated jobs
    """
    action = request.query_params.get('action')

    if action == 'stats':
        return success_response(workflow.workflow_stats())

    elif action == 'status':
        job_id = _require_id(request.query_params.get('jobSheetId'), 'Job sheet ID is required')
        return success_response(workflow.job_workflow_status(job_id))

    elif action == 'overview':
        active_jobs = (JobSheet.objects.filter(is_deleted=False, job_status__in=workflow.ACTIVE_STATUSES)
                       .select_related('machine', 'paper_type').order_by('-created_at', '-id'))
        machines = Machine.objects.filter(status='active').order_by('name')
        low_inventory = (InventoryItem.objects.select_related('party', 'paper_type')
                         .filter(current_quantity__gte=0, current_quantity__lt=settings.LOW_STOCK_THRESHOLD)
                         .order_by('current_quantity')[:LOW_INVENTORY_LIMIT])
        return success_response({
            'active_jobs': OperatorJobSerializer(active_jobs, many=True).data,
            'machine_status': MachineSerializer(machines, many=True).data,
            'low_inventory': InventoryItemSerializer(low_inventory, many=True).data,
        })

    elif action:
        raise ValidationError('Invalid action')

    recent = (JobSheet.objects.filter(is_deleted=False).select_related('machine', 'paper_type')
              .order_by('-updated_at', '-id')[:RECENT_ACTIVITY_LIMIT])
    return success_response(OperatorJobSerializer(recent, many=True).data)
