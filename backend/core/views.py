import logging

from django.contrib.auth import authenticate, login, logout
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from .mail import send_password_reset_email
from .models import AuditLog
from .serializers import (
    UserSerializer, RegisterSerializer, LoginSerializer,
    ForgotPasswordSerializer, ResetPasswordSerializer, AuditLogSerializer
)
from .storage import users
from .throttles import LoginRateThrottle, RegisterRateThrottle
from .utils import create_audit_log

logger = logging.getLogger('backend.auth')

FORGOT_PASSWORD_MESSAGE = 'If an account exists for this email, a reset link has been sent.'


@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    return Response({'ok': True})


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([RegisterRateThrottle])
def register(request):
    """Create an account and open a session for it"""
    serializer = RegisterSerializer(data=request.data)
    if not serializer.is_valid():
        logger.warning(f"Registration validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = serializer.save()
    login(request, user, backend='django.contrib.auth.backends.ModelBackend')
    create_audit_log(request, 'register', 'User', user.id, user=user, object_name=user.username)
    logger.info(f"User {user.username} registered")
    return Response({'user': UserSerializer(user).data}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    """Log in with an email (case-insensitive) or a username"""
    serializer = LoginSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    identifier = serializer.validated_data['identifier']
    password = serializer.validated_data['password']
    account = users.find_by_identifier(identifier)
    user = None
    if account is not None:
        user = authenticate(request, username=account.username, password=password)

    if user is None:
        logger.warning(f"Failed login attempt for '{identifier}'")
        return Response({'error': 'Invalid credentials'}, status=status.HTTP_401_UNAUTHORIZED)

    login(request, user)
    create_audit_log(request, 'login', 'User', user.id, user=user, object_name=user.username)
    logger.info(f"User {user.username} logged in")
    return Response({'user': UserSerializer(user).data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def auth_user(request):
    """Current session user"""
    return Response({'user': UserSerializer(request.user).data})


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    user = request.user
    if user.is_authenticated:
        create_audit_log(request, 'logout', 'User', user.id, user=user, object_name=user.username)
        logger.info(f"User {user.username} logged out")
    logout(request)
    return Response({'message': 'Logged out'})


@api_view(['POST'])
@permission_classes([AllowAny])
def password_forgot(request):
    """Send a reset link; the answer never reveals whether the email is known"""
    serializer = ForgotPasswordSerializer(data=request.data)
    if serializer.is_valid():
        user = users.find_by_email(serializer.validated_data['email'])
        if user is not None and user.is_active:
            raw_token = users.create_password_reset_token(user)
            send_password_reset_email(user, raw_token)
        else:
            logger.info("Password reset requested for an unknown email")
    return Response({'message': FORGOT_PASSWORD_MESSAGE})


@api_view(['POST'])
@permission_classes([AllowAny])
def password_reset(request):
    serializer = ResetPasswordSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user = users.reset_password(
        serializer.validated_data['token'],
        serializer.validated_data['new_password'],
    )
    create_audit_log(request, 'password_reset', 'User', user.id, user=user, object_name=user.username)
    return Response({'message': 'Password updated'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """Most recent audit entries for the current user"""
    logs = AuditLog.objects.filter(user=request.user)
    model_name = request.query_params.get('model_name')
    if model_name:
        logs = logs.filter(model_name=model_name)
    serializer = AuditLogSerializer(logs[:100], many=True)
    return Response(serializer.data)
