"""
API exception handling.

Every exception raised by a view ends up here and is rendered with the
error envelope from `responses.py`.
"""
import logging

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.views import exception_handler

from .responses import error_response

logger = logging.getLogger(__name__)


class ConflictError(APIException):
    """Duplicate names, already deleted rows and blocked deletes"""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Request conflicts with the current state.'
    default_code = 'conflict'


def error_message(detail):
    """Flatten DRF error details into a single human readable string"""
    if isinstance(detail, dict):
        if not detail:
            return 'Invalid request'
        field, value = next(iter(detail.items()))
        message = error_message(value)
        if field in ('non_field_errors', 'detail'):
            return message
        return message if _names_field(message, field) else f"{field}: {message}"
    if isinstance(detail, (list, tuple)):
        return error_message(detail[0]) if detail else 'Invalid request'
    return str(detail)


def _names_field(message, field):
    return field.replace('_', ' ').lower() in message.lower()


def api_exception_handler(exc, context):
    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        logger.exception(f"Unhandled error in {view.__class__.__name__ if view else 'view'}: {exc}")
        return error_response(str(exc) or 'Internal server error', status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, Http404):
        message = str(exc) or 'Not found'
        # get_object_or_404 messages name the model; keep them short
        if 'matches the given query' in message:
            message = 'Not found'
        return error_response(message, status=response.status_code)

    detail = getattr(exc, 'detail', response.data)
    errors = detail if isinstance(detail, dict) and set(detail) != {'detail'} else None
    error = error_response(error_message(detail), status=response.status_code, errors=errors)
    for header in ('WWW-Authenticate', 'Retry-After'):
        if header in response:
            error[header] = response[header]
    return error
