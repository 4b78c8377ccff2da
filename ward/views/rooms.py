"""Labor room endpoints: everyone can list rooms, administrators manage them."""
from __future__ import annotations

from django.db import transaction
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ward.permissions import IsAdminRole
from ward.serializers.room import RoomCreateSerializer, RoomListQuerySerializer, RoomUpdateSerializer
from ward.services import rooms


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_rooms(request):
    q = RoomListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    data = [rooms.format_room(r) for r in rooms.list_rooms(available_only=q.validated_data['available'])]
    return Response({'ok': True, 'data': data})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def create_room(request):
    s = RoomCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    room = rooms.create_room(request.user, name=s.validated_data['name'])
    return Response({'ok': True, 'data': rooms.format_room(room)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def update_room(request):
    s = RoomUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    with transaction.atomic():
        room = rooms.lock_room(v['id'])
        if 'name' in v:
            room = rooms.rename(request.user, room.id, v['name'])
        if 'nurseId' in v:
            room = rooms.assign_nurse(request.user, room.id, v['nurseId'])
    room.refresh_from_db()
    return Response({'ok': True, 'data': rooms.format_room(room)})
