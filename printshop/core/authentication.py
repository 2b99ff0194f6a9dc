"""
Signed cookie authentication for the dashboard admin.

`auth/admin-login/` checks the shared passcode and sets the `admin-auth`
cookie. The cookie value is signed with SECRET_KEY and expires after
ADMIN_COOKIE_MAX_AGE seconds; a valid cookie authenticates requests as
the ADMIN_USERNAME account.
"""
import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core import signing
from rest_framework.authentication import BaseAuthentication

logger = logging.getLogger(__name__)

User = get_user_model()

ADMIN_COOKIE_VALUE = 'true'


def sign_admin_cookie():
    return signing.dumps(ADMIN_COOKIE_VALUE, salt=settings.ADMIN_COOKIE_SALT)


def read_admin_cookie(value):
    try:
        payload = signing.loads(value, salt=settings.ADMIN_COOKIE_SALT, max_age=settings.ADMIN_COOKIE_MAX_AGE)
    except signing.BadSignature:
        return False
    return payload == ADMIN_COOKIE_VALUE


class AdminCookieAuthentication(BaseAuthentication):

    def authenticate(self, request):
        value = request.COOKIES.get(settings.ADMIN_COOKIE_NAME)
        if not value:
            return None
        if not read_admin_cookie(value):
            logger.info("Ignoring invalid or expired admin cookie")
            return None
        user = User.objects.filter(username=settings.ADMIN_USERNAME, is_active=True).first()
        if user is None:
            logger.warning(f"Admin cookie presented but account '{settings.ADMIN_USERNAME}' does not exist")
            return None
        return (user, None)

    def authenticate_header(self, request):
        return 'Bearer realm="api"'
