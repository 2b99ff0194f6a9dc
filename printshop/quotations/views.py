import logging

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError, NotFound
from rest_framework.permissions import BasePermission, IsAuthenticated

from printshop.core.permissions import is_admin_user
from printshop.core.rate_limit import RateLimiter
from printshop.core.responses import success_response, error_response
from printshop.core.utils import actor_name, create_audit_log, get_client_ip
from . import services
from .models import QuotationRequest
from .serializers import QuotationNoteSerializer, QuotationRequestSerializer, QuotationUpdateSerializer

logger = logging.getLogger(__name__)

submission_limiter = RateLimiter(
    max_attempts=settings.QUOTATION_RATE_LIMIT_ATTEMPTS,
    window=60 * 60,
    prefix='quotation',
)


class IsAuthenticatedOrSubmitting(BasePermission):
    """Anyone may submit a quote request; everything else needs a login"""

    def has_permission(self, request, view):
        if request.method == 'POST':
            return True
        return bool(request.user and request.user.is_authenticated)


def _get_quotation(pk):
    quotation = QuotationRequest.objects.filter(pk=pk).first()
    if quotation is None:
        raise NotFound('Quotation not found')
    return quotation


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticatedOrSubmitting])
def quotation_list_create(request):
    """Staff list (?status=) or public submission"""
    if request.method == 'GET':
        quotations = QuotationRequest.objects.all().order_by('-created_at')
        status_filter = request.query_params.get('status')
        if status_filter:
            quotations = quotations.filter(status=status_filter)
        return success_response(QuotationRequestSerializer(quotations, many=True).data)

    identifier = get_client_ip(request) or 'unknown'
    if not submission_limiter.is_allowed(identifier):
        return error_response('Too many requests. Please try again later.', status=status.HTTP_429_TOO_MANY_REQUESTS)

    serializer = QuotationRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    quotation = serializer.save()
    logger.info(f"Quotation {quotation.id} submitted by {quotation.client_email}")
    return success_response(QuotationRequestSerializer(quotation).data,
                            message="Quotation request submitted successfully. We'll contact you with a quote soon.",
                            status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def quotation_detail(request, pk):
    """Retrieve (with notes), update status / prices, or delete a quotation"""
    quotation = _get_quotation(pk)

    if request.method == 'GET':
        data = QuotationRequestSerializer(quotation).data
        data['notes'] = QuotationNoteSerializer(quotation.notes.all(), many=True).data
        return success_response(data)

    elif request.method == 'PATCH':
        serializer = QuotationUpdateSerializer(quotation, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        if not serializer.validated_data:
            raise ValidationError('Nothing to update')
        old_status = quotation.status
        quotation = serializer.save()
        changes = {k: str(v) for k, v in serializer.validated_data.items()}
        create_audit_log(request=request,
                         action='status_change' if quotation.status != old_status else 'update',
                         model_name='QuotationRequest', object_id=quotation.id, object_name=str(quotation),
                         changes=changes)
        return success_response(QuotationRequestSerializer(quotation).data, message='Quotation updated successfully')

    if not is_admin_user(request.user):
        return error_response('Admin access required', status=status.HTTP_403_FORBIDDEN)
    name = str(quotation)
    quotation.delete()
    create_audit_log(request=request, action='delete', model_name='QuotationRequest', object_id=pk, object_name=name)
    return success_response(None, message='Quotation deleted successfully')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def quotation_notes(request, pk):
    quotation = _get_quotation(pk)
    if request.method == 'GET':
        return success_response(QuotationNoteSerializer(quotation.notes.all(), many=True).data)

    serializer = QuotationNoteSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    note = serializer.save(quotation=quotation, created_by=actor_name(request))
    return success_response(QuotationNoteSerializer(note).data, message='Note added successfully',
                            status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def quotation_invoice(request, pk):
    """Generate the invoice number for a quotation"""
    quotation = services.generate_invoice(pk)
    create_audit_log(request=request, action='update', model_name='QuotationRequest', object_id=quotation.id,
                     object_name=str(quotation), changes={'invoice_number': quotation.invoice_number})
    return success_response(QuotationRequestSerializer(quotation).data,
                            message=f"Invoice {quotation.invoice_number} generated successfully")
