import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.utils.crypto import constant_time_compare
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError

from .authentication import sign_admin_cookie
from .models import AuditLog
from .operators import public_accounts, setup_accounts
from .permissions import has_shared_secret, is_admin_user, IsAdminRole
from .rate_limit import RateLimiter
from .responses import success_response, error_response
from .serializers import UserSerializer, AuditLogSerializer, AdminLoginSerializer
from .utils import create_audit_log, get_client_ip

logger = logging.getLogger(__name__)

User = get_user_model()

login_limiter = RateLimiter(
    max_attempts=settings.LOGIN_RATE_LIMIT_ATTEMPTS,
    window=settings.LOGIN_RATE_LIMIT_WINDOW,
    prefix='login',
)

TOO_MANY_ATTEMPTS = 'Too many login attempts. Please try again later.'


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')
        data['user'] = UserSerializer(self.user).data
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        token['groups'] = list(user.groups.values_list('name', flat=True))
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    """JWT login, rate limited per client IP"""
    serializer_class = CustomTokenObtainPairSerializer

    def post(self, request, *args, **kwargs):
        identifier = get_client_ip(request) or 'unknown'
        if not login_limiter.is_allowed(identifier):
            return error_response(TOO_MANY_ATTEMPTS, status=status.HTTP_429_TOO_MANY_REQUESTS)
        response = super().post(request, *args, **kwargs)
        user = User.objects.filter(username=request.data.get('username')).first()
        create_audit_log(request=request, action='login', model_name='User',
                         object_id=user.id if user else 'unknown', user=user,
                         object_name=request.data.get('username'))
        return success_response(response.data)


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that treats tokens of deleted users as invalid"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except ObjectDoesNotExist:
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer

    def post(self, request, *args, **kwargs):
        response = super().post(request, *args, **kwargs)
        return success_response(response.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Current user with role based access flags"""
    user = request.user
    data = UserSerializer(user).data
    data['groups'] = list(user.groups.values_list('name', flat=True))
    data['is_admin'] = is_admin_user(user)
    data['can_access_dashboard'] = data['is_admin']
    data['can_operate_machines'] = True
    return success_response(data)


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def admin_login(request):
    """Exchange the shared admin passcode for the signed admin-auth cookie"""
    identifier = get_client_ip(request) or 'unknown'
    if not login_limiter.is_allowed(f"admin:{identifier}"):
        return error_response(TOO_MANY_ATTEMPTS, status=status.HTTP_429_TOO_MANY_REQUESTS)

    serializer = AdminLoginSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    passcode = settings.ADMIN_PASSCODE
    if not passcode or not constant_time_compare(serializer.validated_data['passcode'], passcode):
        logger.warning(f"Failed admin login from {identifier}")
        return error_response('Invalid passcode', status=status.HTTP_401_UNAUTHORIZED)

    login_limiter.reset(f"admin:{identifier}")
    response = success_response({'authenticated': True}, message='Logged in')
    response.set_cookie(
        settings.ADMIN_COOKIE_NAME,
        sign_admin_cookie(),
        max_age=settings.ADMIN_COOKIE_MAX_AGE,
        httponly=True,
        secure=not settings.DEBUG,
        samesite='Lax',
    )
    return response


@api_view(['POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def admin_logout(request):
    response = success_response({'authenticated': False}, message='Logged out')
    response.delete_cookie(settings.ADMIN_COOKIE_NAME, samesite='Lax')
    return response


@api_view(['GET', 'POST'])
@authentication_classes([])
@permission_classes([AllowAny])
def setup_users(request):
    """List the configured operator accounts, or create / update them"""
    if request.method == 'GET':
        return success_response({'users': public_accounts()}, message='User setup endpoint')

    if not settings.DEBUG and not has_shared_secret(request, 'SETUP_SECRET'):
        return error_response('Unauthorized', status=status.HTTP_401_UNAUTHORIZED)

    results, summary = setup_accounts()
    return success_response({'results': results, 'summary': summary}, message='User setup completed')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        queryset = queryset.filter(created_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(created_at__date__lte=date_to)

    queryset = queryset.order_by('-created_at')[:200]
    return success_response(AuditLogSerializer(queryset, many=True).data)
