"""Staff directory endpoints (administrators only)."""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ward.permissions import IsAdminRole
from ward.serializers.user import UserCreateSerializer, UserListQuerySerializer, UserUpdateSerializer
from ward.services import users


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_users(request):
    q = UserListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    rows = users.list_staff(role=q.validated_data.get('role'))
    return Response({'ok': True, 'data': [users.format_user(u) for u in rows]})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def create_user(request):
    s = UserCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = users.create_staff_user(request.user, name=v['name'], email=v['email'], role=v['role'], password=v['password'])
    return Response({'ok': True, 'data': users.format_user(user)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def update_user(request):
    s = UserUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    user = users.update_staff_user(
        request.user, v['id'], name=v.get('name'), role=v.get('role'), is_active=v.get('isActive'),
    )
    return Response({'ok': True, 'data': users.format_user(user)})
