"""Response envelope shared by every endpoint"""
from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data=None, message=None, status=http_status.HTTP_200_OK):
    """Wrap a payload as {"success": true, "data": ..., "message"?}"""
    body = {'success': True, 'data': data}
    if message:
        body['message'] = message
    return Response(body, status=status)


def error_response(message, status=http_status.HTTP_400_BAD_REQUEST, errors=None):
    """Wrap an error as {"success": false, "error": ..., "errors"?}"""
    body = {'success': False, 'error': message}
    if errors:
        body['errors'] = errors
    return Response(body, status=status)
