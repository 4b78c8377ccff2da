"""
Labor room allocation.

A room is either free (no patient, not occupied) or held by exactly one
patient.  :func:`occupy` and :func:`release` are called by the patient
lifecycle functions inside their own transaction; the administrative
helpers open one themselves.  All writes lock the room row first.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from rest_framework.exceptions import NotFound

from ward.exceptions import InvalidTransitionError, RoomUnavailableError, ValidationError
from ward.models import ActivityLog, LaborRoom, Patient
from ward.services.audit import record_activity
from ward.services.broadcast import publish_change
from ward.services.sanitize import clean_text

logger = logging.getLogger(__name__)

User = get_user_model()


def lock_room(room_id) -> LaborRoom:
    try:
        return LaborRoom.objects.select_for_update().get(id=room_id)
    except (LaborRoom.DoesNotExist, ValueError, TypeError):
        raise NotFound(f'labor room {room_id} not found')


def ensure_nurse(nurse) -> User:
    """Return ``nurse`` if it is an active labor nurse, else raise :class:`ValidationError`."""
    if not (nurse and nurse.is_active and nurse.role == User.Role.LABOR_NURSE):
        raise ValidationError('an active labor nurse is required')
    return nurse


def occupy(room_id, patient: Patient, nurse) -> LaborRoom:
    room = lock_room(room_id)
    if room.is_occupied or room.current_patient_id:
        raise RoomUnavailableError(f'{room.name} is already occupied')
    room.is_occupied = True
    room.current_patient = patient
    room.assigned_nurse = nurse
    room.save(update_fields=['is_occupied', 'current_patient', 'assigned_nurse', 'updated_at'])
    publish_change('room', room.id)
    return room


def release(*, room_id=None, patient_id=None) -> Optional[LaborRoom]:
    """Free the room holding ``patient_id`` (or the room ``room_id``).

    Returns the released room, or ``None`` when nothing held the patient.
    A room whose patient is still in labor is never released; the
    patient has to be delivered first.
    """
    if room_id is None and patient_id is None:
        raise ValueError('room_id or patient_id is required')
    qs = LaborRoom.objects.select_for_update()
    room = qs.filter(id=room_id).first() if room_id is not None else qs.filter(current_patient_id=patient_id).first()
    if room is None or not room.is_occupied:
        return None
    if Patient.objects.filter(id=room.current_patient_id, status=Patient.Status.IN_LABOR).exists():
        raise InvalidTransitionError(f'{room.name} still holds a patient in labor')
    room.is_occupied = False
    room.current_patient = None
    room.assigned_nurse = None
    room.save(update_fields=['is_occupied', 'current_patient', 'assigned_nurse', 'updated_at'])
    publish_change('room', room.id)
    return room


def room_for_nurse(nurse) -> Optional[LaborRoom]:
    """First free room assigned to ``nurse``."""
    return LaborRoom.objects.filter(assigned_nurse=nurse, is_occupied=False).order_by('name').first()


@transaction.atomic
def create_room(actor, *, name: str) -> LaborRoom:
    name = clean_text(name, 'room name')
    if LaborRoom.objects.filter(name__iexact=name).exists():
        raise ValidationError(f'a room named {name} already exists')
    try:
        with transaction.atomic():
            room = LaborRoom.objects.create(name=name)
    except IntegrityError:
        raise ValidationError(f'a room named {name} already exists')
    record_activity(user=actor, action=ActivityLog.Action.ROOM_CREATED, details=f'Labor room {room.name} created')
    publish_change('room', room.id)
    logger.info('room %s (%s) created', room.id, room.name)
    return room


@transaction.atomic
def rename(actor, room_id, name: str) -> LaborRoom:
    room = lock_room(room_id)
    name = clean_text(name, 'room name')
    if name == room.name:
        return room
    if LaborRoom.objects.filter(name__iexact=name).exclude(id=room.id).exists():
        raise ValidationError(f'a room named {name} already exists')
    old = room.name
    room.name = name
    room.save(update_fields=['name', 'updated_at'])
    record_activity(user=actor, action=ActivityLog.Action.ROOM_UPDATED, details=f'Labor room {old} renamed to {name}')
    publish_change('room', room.id)
    return room


@transaction.atomic
def assign_nurse(actor, room_id, nurse_id) -> LaborRoom:
    """Assign (or with ``nurse_id=None`` clear) the nurse responsible for a room.

    Allowed whether or not the room is occupied.  Assigning a nurse to an
    occupied room hands the current patient over to that nurse as well.
    """
    room = lock_room(room_id)
    nurse = None
    if nurse_id is not None:
        nurse = ensure_nurse(User.objects.filter(id=nurse_id).first())
    if room.assigned_nurse_id == (nurse.id if nurse else None):
        return room
    room.assigned_nurse = nurse
    room.save(update_fields=['assigned_nurse', 'updated_at'])
    if nurse and room.current_patient_id:
        Patient.objects.filter(
            id=room.current_patient_id, status=Patient.Status.IN_LABOR
        ).update(assigned_nurse=nurse)
        publish_change('patient', room.current_patient_id)
    details = f'Labor room {room.name} assigned to {nurse.display_name}' if nurse else f'Labor room {room.name} nurse cleared'
    record_activity(user=actor, action=ActivityLog.Action.ROOM_UPDATED, details=details,
                    patient=room.current_patient)
    publish_change('room', room.id)
    return room


def list_rooms(*, available_only: bool = False) -> list[LaborRoom]:
    qs = LaborRoom.objects.select_related('assigned_nurse', 'current_patient')
    if available_only:
        qs = qs.filter(is_occupied=False)
    return list(qs.order_by('name'))


def format_room(room: LaborRoom) -> dict:
    return {
        'id': room.id,
        'name': room.name,
        'isOccupied': room.is_occupied,
        'assignedNurseId': room.assigned_nurse_id,
        'assignedNurseName': room.assigned_nurse.display_name if room.assigned_nurse else None,
        'currentPatientId': room.current_patient_id,
        'currentPatientName': room.current_patient.full_name if room.current_patient else None,
    }
