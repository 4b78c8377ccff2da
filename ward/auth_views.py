"""
Authentication views.

Login issues both a DRF token (``Authorization: Token <key>``) and a
simplejwt access/refresh pair; the front-end may use either.  These
views live apart from :mod:`ward.authentication` so DRF can load the
authentication class without importing any views.
"""
from __future__ import annotations

import logging

from django.contrib.auth import authenticate
from rest_framework.authtoken.models import Token
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.token_blacklist.models import BlacklistedToken, OutstandingToken
from rest_framework_simplejwt.tokens import RefreshToken
from rest_framework_simplejwt.views import TokenRefreshView

from ward.exceptions import ValidationError
from ward.serializers.auth import LoginSerializer, LogoutSerializer
from ward.services.users import format_user

logger = logging.getLogger(__name__)


@api_view(['POST'])
@permission_classes([AllowAny])
def login_view(request):
    s = LoginSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    username = s.validated_data['username']

    user = authenticate(request, username=username, password=s.validated_data['password'])
    if not user:
        logger.warning('failed login for %s from %s', username, request.META.get('REMOTE_ADDR'))
        raise ValidationError('invalid username or password')

    token_obj, _ = Token.objects.get_or_create(user=user)
    refresh = RefreshToken.for_user(user)
    logger.info('user %s logged in', user.username)
    return Response({
        'ok': True,
        'data': {
            'token': token_obj.key,
            'jwt_access': str(refresh.access_token),
            'jwt_refresh': str(refresh),
            'user': format_user(user),
        },
    })

# ScopedRateThrottle reads throttle_scope from the APIView class @api_view builds
login_view.cls.throttle_scope = 'login'


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def me_view(request):
    return Response({'ok': True, 'data': format_user(request.user)})


@api_view(['POST'])
@permission_classes([AllowAny])
def jwt_refresh_view(request):
    """Return a new access token from a refresh token."""
    resp = TokenRefreshView.as_view()(request._request)
    if resp.status_code != 200:
        return resp
    data = dict(resp.data)
    if 'access' in data:
        data['jwt_access'] = data.pop('access')
    if 'refresh' in data:
        data['jwt_refresh'] = data.pop('refresh')
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def jwt_logout_view(request):
    """Blacklist the given refresh token, or every outstanding one of the user."""
    s = LogoutSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    refresh = s.validated_data.get('refresh')
    count = 0
    if refresh:
        try:
            RefreshToken(refresh).blacklist()
        except TokenError as e:
            raise ValidationError(str(e))
        count = 1
    else:
        for token in OutstandingToken.objects.filter(user=request.user):
            _, created = BlacklistedToken.objects.get_or_create(token=token)
            count += int(created)
    Token.objects.filter(user=request.user).delete()
    return Response({'ok': True, 'data': {'blacklisted': count}})
