import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError, NotFound
from rest_framework.permissions import IsAuthenticated

from printshop.core.permissions import is_admin_user
from printshop.core.responses import success_response, error_response
from printshop.core.utils import actor_name, create_audit_log
from . import services
from .filters import JobSheetFilter
from .models import JobSheet, JobSheetNote, PaperType
from .serializers import JobSheetSerializer, JobSheetNoteSerializer, PaperTypeSerializer

logger = logging.getLogger(__name__)


def _job_sheets():
    return JobSheet.objects.select_related('party', 'paper_type', 'machine')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def job_sheet_list_create(request):
    """List job sheets (newest first) or create one, billing its party"""
    if request.method == 'GET':
        filterset = JobSheetFilter(request.query_params, queryset=_job_sheets())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return success_response(JobSheetSerializer(filterset.qs.order_by('-id'), many=True).data)

    serializer = JobSheetSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    sheet = services.create_job_sheet(serializer.validated_data, created_by=actor_name(request))
    create_audit_log(request=request, action='create', model_name='JobSheet', object_id=sheet.id,
                     object_name=str(sheet),
                     changes={'total_cost': str(sheet.total_cost), 'party_id': sheet.party_id})
    sheet = _job_sheets().get(pk=sheet.pk)
    return success_response(JobSheetSerializer(sheet).data, message='Job sheet created successfully',
                            status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def job_sheet_detail(request, pk):
    """Retrieve, edit or hard delete a job sheet"""
    sheet = _job_sheets().filter(pk=pk).first()
    if sheet is None:
        raise NotFound('Job sheet not found')

    if request.method == 'GET':
        data = JobSheetSerializer(sheet).data
        data['notes'] = JobSheetNoteSerializer(sheet.notes.all(), many=True).data
        return success_response(data)

    elif request.method in ('PUT', 'PATCH'):
        if sheet.is_deleted:
            raise ValidationError('Cannot edit a deleted job sheet')
        serializer = JobSheetSerializer(sheet, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        sheet = services.update_job_sheet(sheet, serializer.validated_data)
        create_audit_log(request=request, action='update', model_name='JobSheet', object_id=sheet.id,
                         object_name=str(sheet),
                         changes={k: v for k, v in request.data.items() if k in serializer.fields and k != 'id'})
        return success_response(JobSheetSerializer(_job_sheets().get(pk=sheet.pk)).data,
                                message='Job sheet updated successfully')

    if not is_admin_user(request.user):
        return error_response('Admin access required', status=status.HTTP_403_FORBIDDEN)
    name = str(sheet)
    services.delete_job_sheet(sheet.id)
    create_audit_log(request=request, action='delete', model_name='JobSheet', object_id=pk, object_name=name)
    return success_response({'deleted_id': pk}, message='Job sheet deleted successfully')


@api_view(['PATCH'])
@permission_classes([IsAuthenticated])
def job_sheet_soft_delete(request, pk):
    """Soft delete a job sheet; deletion_reason is required"""
    deleted_by = request.data.get('deleted_by') or actor_name(request)
    sheet = services.soft_delete_job_sheet(pk, request.data.get('deletion_reason'), deleted_by=deleted_by)
    create_audit_log(request=request, action='soft_delete', model_name='JobSheet', object_id=sheet.id,
                     object_name=str(sheet), changes={'reason': sheet.deletion_reason})
    return success_response(JobSheetSerializer(_job_sheets().get(pk=sheet.pk)).data,
                            message='Job sheet marked as deleted successfully')


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def job_sheet_report(request, pk):
    """Report payload for one job sheet: the sheet with its total cost and notes"""
    sheet = _job_sheets().filter(pk=pk).first()
    if sheet is None:
        raise NotFound('Job sheet not found')

    generated_at = timezone.now()
    # last six digits of the epoch milliseconds
    report_number = f"GO-JS-{sheet.id}-{int(generated_at.timestamp() * 1000) % 1000000:06d}"
    data = JobSheetSerializer(sheet).data
    data['totalCost'] = sheet.total_cost
    logger.info(f"Generated report {report_number} for job sheet {sheet.id}")
    return success_response({
        'reportNumber': report_number,
        'jobSheet': data,
        'notes': JobSheetNoteSerializer(sheet.notes.order_by('-created_at', '-id'), many=True).data,
        'generatedAt': generated_at.isoformat(),
    }, message='Report generated successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def job_sheet_notes(request):
    """Notes, newest first; ?job_sheet_id= narrows to one sheet"""
    if request.method == 'GET':
        notes = JobSheetNote.objects.all().order_by('-created_at', '-id')
        job_sheet_id = request.query_params.get('job_sheet_id')
        if job_sheet_id:
            if not job_sheet_id.isdigit():
                raise ValidationError('Invalid job sheet ID')
            notes = notes.filter(job_sheet_id=job_sheet_id)
        return success_response(JobSheetNoteSerializer(notes, many=True).data)

    serializer = JobSheetNoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    note = serializer.save(author=serializer.validated_data.get('author') or actor_name(request))
    return success_response(JobSheetNoteSerializer(note).data, message='Note added successfully',
                            status=status.HTTP_201_CREATED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def paper_types(request):
    if request.method == 'GET':
        return success_response(PaperTypeSerializer(PaperType.objects.all().order_by('name'), many=True).data)

    serializer = PaperTypeSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    paper_type = serializer.save()
    logger.info(f"Created paper type {paper_type.id}: {paper_type}")
    return success_response(PaperTypeSerializer(paper_type).data, message='Paper type created successfully',
                            status=status.HTTP_201_CREATED)
