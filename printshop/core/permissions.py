from django.conf import settings
from django.utils.crypto import constant_time_compare
from rest_framework.permissions import BasePermission


def bearer_token(request):
    header = request.META.get('HTTP_AUTHORIZATION', '')
    if header.startswith('Bearer '):
        return header[len('Bearer '):].strip()
    return ''


def has_shared_secret(request, setting_name, query_param=None):
    """
    Check `Authorization: Bearer <secret>` (or `?<query_param>=<secret>`)
    against settings.<setting_name>. An unset secret never matches.
    """
    secret = getattr(settings, setting_name, '')
    if not secret:
        return False
    token = bearer_token(request)
    if not token and query_param:
        token = request.query_params.get(query_param, '')
    return bool(token) and constant_time_compare(token, secret)


def is_admin_user(user):
    """
    Check if user may perform destructive dashboard operations.
    Returns True if:
    - User has the admin or supervisor role, OR
    - User is in the 'Admin' or 'Supervisor' group, OR
    - User is superuser/staff
    """
    if not user or not user.is_authenticated:
        return False
    if getattr(user, 'role', None) in ('admin', 'supervisor'):
        return True
    if user.groups.filter(name__in=['Admin', 'Supervisor']).exists():
        return True
    return user.is_superuser or user.is_staff


class IsAdminRole(BasePermission):
    message = 'Admin access required'

    def has_permission(self, request, view):
        return is_admin_user(request.user)
