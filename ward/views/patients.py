"""
Patient lifecycle endpoints.

Front desk staff register patients; labor nurses accept them into a
labor room and complete the delivery.  Administrators may do both but
must name the nurse when accepting a patient.
"""
from __future__ import annotations

from django.contrib.auth import get_user_model
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status

from ward.exceptions import RoomUnavailableError, ValidationError
from ward.permissions import IsFrontDeskRole, IsLaborNurseRole
from ward.serializers.patient import (
    CompleteDeliverySerializer,
    PatientAcceptSerializer,
    PatientListQuerySerializer,
    PatientRegisterSerializer,
)
from ward.services import patients as lifecycle
from ward.services.rooms import ensure_nurse, format_room, room_for_nurse

User = get_user_model()


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_patients(request):
    q = PatientListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    nurse = request.user if q.validated_data.get('nurse') == 'me' else None
    rows = lifecycle.list_patients(status=q.validated_data.get('status'), nurse=nurse)
    return Response({'ok': True, 'data': [lifecycle.format_patient(p) for p in rows]})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsFrontDeskRole])
def register_patient(request):
    s = PatientRegisterSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    patient = lifecycle.register_patient(
        request.user,
        full_name=v['fullName'],
        next_of_kin_name=v['nextOfKinName'],
        next_of_kin_phone=v['nextOfKinPhone'],
        delivery_date=v.get('deliveryDate'),
    )
    return Response({'ok': True, 'data': lifecycle.format_patient(patient)}, status=status.HTTP_201_CREATED)


def _accepting_nurse(request, nurse_id):
    if request.user.role == User.Role.LABOR_NURSE:
        if nurse_id not in (None, request.user.id):
            raise ValidationError('nurses can only accept patients for themselves')
        return request.user
    if nurse_id is None:
        raise ValidationError('nurseId is required')
    return ensure_nurse(User.objects.filter(id=nurse_id).first())


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsLaborNurseRole])
def accept_patient(request):
    s = PatientAcceptSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    nurse = _accepting_nurse(request, v.get('nurseId'))
    room_id = v.get('roomId')
    if room_id is None:
        room = room_for_nurse(nurse)
        if room is None:
            raise RoomUnavailableError('no free labor room is assigned to this nurse')
        room_id = room.id
    patient = lifecycle.accept_patient_into_room(request.user, patient_id=v['patientId'], room_id=room_id, nurse=nurse)
    return Response({'ok': True, 'data': lifecycle.format_patient(patient)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsLaborNurseRole])
def complete_delivery(request):
    s = CompleteDeliverySerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    outcome = lifecycle.complete_delivery(
        request.user,
        patient_id=v['patientId'],
        baby_gender=v['babyGender'],
        delivery_notes=v.get('deliveryNotes') or '',
        template_id=v['templateId'],
    )
    return Response({'ok': True, 'data': {
        'patient': lifecycle.format_patient(outcome.patient),
        'room': format_room(outcome.room) if outcome.room else None,
        'message': outcome.message,
    }})
