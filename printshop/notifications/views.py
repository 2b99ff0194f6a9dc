import logging

from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.exceptions import ValidationError, NotFound
from rest_framework.permissions import AllowAny, IsAuthenticated

from printshop.core.permissions import has_shared_secret
from printshop.core.responses import success_response, error_response
from .models import OperatorNotification
from .serializers import OperatorNotificationSerializer
from .worker import process_pending_emails

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


def _parse_limit(value, default=DEFAULT_LIMIT):
    try:
        limit = int(value)
    except (TypeError, ValueError):
        return default
    return limit if limit > 0 else default


@api_view(['GET', 'PUT', 'PATCH'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """
    GET   ?machine_id=&unread_only=&limit=  list a machine's notifications
    PUT   ?notification_id=  {"read": bool}  mark one notification
    PATCH ?machine_id=                       mark all of a machine's notifications read
    """
    if request.method == 'PUT':
        notification_id = request.query_params.get('notification_id')
        if not notification_id or not notification_id.isdigit():
            raise ValidationError('Notification ID is required')
        read = request.data.get('read')
        if not isinstance(read, bool):
            raise ValidationError('Read status must be a boolean')

        notification = OperatorNotification.objects.filter(pk=notification_id).first()
        if notification is None:
            raise NotFound('Notification not found')
        notification.read = read
        notification.save(update_fields=['read', 'updated_at'])
        return success_response(OperatorNotificationSerializer(notification).data,
                                message='Notification updated successfully')

    machine_id = request.query_params.get('machine_id')
    if not machine_id or not machine_id.isdigit():
        raise ValidationError('Machine ID is required')

    if request.method == 'PATCH':
        updated = OperatorNotification.objects.filter(machine_id=machine_id, read=False).update(read=True)
        logger.info(f"Marked {updated} notifications read for machine {machine_id}")
        return success_response({'updated': updated}, message='All notifications marked as read')

    notifications = OperatorNotification.objects.filter(machine_id=machine_id).select_related('machine')
    if request.query_params.get('unread_only') == 'true':
        notifications = notifications.filter(read=False)
    limit = _parse_limit(request.query_params.get('limit'))
    notifications = notifications.order_by('-created_at', '-id')[:limit]
    return success_response({'notifications': OperatorNotificationSerializer(notifications, many=True).data})


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def email_worker(request):
    """
    Drain the pending email queue.

    POST is called by the scheduler with `Authorization: Bearer <CRON_SECRET>`;
    GET accepts `?token=<EMAIL_WORKER_TOKEN>` for manual runs.
    """
    if request.method == 'POST':
        if not has_shared_secret(request, 'CRON_SECRET'):
            return error_response('Unauthorized', status=status.HTTP_401_UNAUTHORIZED)
    else:
        if not has_shared_secret(request, 'EMAIL_WORKER_TOKEN', query_param='token'):
            return error_response('Invalid token', status=status.HTTP_401_UNAUTHORIZED)

    result = process_pending_emails()
    return success_response(result, message=result['message'])
