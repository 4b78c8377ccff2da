"""
Patient lifecycle: registered -> in_labor -> delivered.

Each transition runs in one transaction that locks the patient row (and
the room row through :mod:`ward.services.rooms`), re-checks the current
status against :data:`TRANSITIONS`, applies the patient and room writes
together and appends one activity entry.  Either everything commits or
nothing does.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import NotFound

from ward.exceptions import InvalidTransitionError, ValidationError
from ward.models import ActivityLog, LaborRoom, Patient
from ward.services import rooms
from ward.services.audit import record_activity
from ward.services.broadcast import publish_change
from ward.services.notifications import send_sms
from ward.services.sanitize import clean_text
from ward.services.templates import format_delivery_time, render, resolve_template

logger = logging.getLogger(__name__)

Status = Patient.Status

TRANSITIONS = {
    Status.REGISTERED: [Status.IN_LABOR],
    Status.IN_LABOR: [Status.DELIVERED],
    Status.DELIVERED: [],
}


def can_transition(current: str, new: str) -> bool:
    return new in TRANSITIONS.get(current, [])


def _ensure_transition(patient: Patient, new: str) -> None:
    if not can_transition(patient.status, new):
        raise InvalidTransitionError(
            f'cannot move {patient.full_name} from {patient.status} to {new}'
        )


def lock_patient(patient_id) -> Patient:
    try:
        return Patient.objects.select_for_update().get(id=patient_id)
    except (Patient.DoesNotExist, ValueError, TypeError):
        raise NotFound(f'patient {patient_id} not found')


@dataclass
class DeliveryOutcome:
    patient: Patient
    room: Optional[LaborRoom]
    message: str


@transaction.atomic
def register_patient(actor, *, full_name: str, next_of_kin_name: str, next_of_kin_phone: str,
                     delivery_date: Optional[date] = None) -> Patient:
    patient = Patient.objects.create(
        full_name=clean_text(full_name, 'full name'),
        next_of_kin_name=clean_text(next_of_kin_name, 'next of kin name'),
        next_of_kin_phone=clean_text(next_of_kin_phone, 'next of kin phone'),
        delivery_date=delivery_date,
        registered_by=actor,
    )
    record_activity(user=actor, action=ActivityLog.Action.PATIENT_REGISTERED,
                    details=f'New patient {patient.full_name} registered', patient=patient)
    publish_change('patient', patient.id)
    logger.info('patient %s registered by %s', patient.id, actor.username)
    return patient


@transaction.atomic
def accept_patient_into_room(actor, *, patient_id, room_id, nurse=None) -> Patient:
    """Move a registered patient into labor in ``room_id`` under ``nurse``.

    ``nurse`` defaults to ``actor``.  The patient row is checked first so
    an invalid transition is reported before room availability.
    """
    nurse = rooms.ensure_nurse(nurse or actor)
    patient = lock_patient(patient_id)
    _ensure_transition(patient, Status.IN_LABOR)
    room = rooms.occupy(room_id, patient, nurse)

    patient.status = Status.IN_LABOR
    patient.assigned_nurse = nurse
    patient.labor_room = room
    patient.save(update_fields=['status', 'assigned_nurse', 'labor_room'])

    record_activity(user=actor, action=ActivityLog.Action.PATIENT_ACCEPTED,
                    details=f'Patient {patient.full_name} accepted into {room.name}', patient=patient)
    publish_change('patient', patient.id)
    logger.info('patient %s accepted into room %s by nurse %s', patient.id, room.id, nurse.id)
    return patient


@transaction.atomic
def complete_delivery(actor, *, patient_id, baby_gender: str, delivery_notes: str = '',
                      template_id=None, now: Optional[datetime] = None) -> DeliveryOutcome:
    """Mark an in-labor patient delivered, free the room and text the next of kin.

    The template is resolved before anything is written.  The SMS goes
    out last; if the transport fails the whole transition rolls back.
    """
    if baby_gender not in Patient.BabyGender.values:
        raise ValidationError(f'baby gender must be one of {", ".join(Patient.BabyGender.values)}')
    patient = lock_patient(patient_id)
    _ensure_transition(patient, Status.DELIVERED)
    template = resolve_template(template_id)

    now = now or timezone.now()
    message = render(template, patient, {
        'babyGender': baby_gender,
        'deliveryTime': format_delivery_time(now),
    })

    patient.status = Status.DELIVERED
    patient.delivered_at = now
    patient.baby_gender = baby_gender
    patient.delivery_notes = clean_text(delivery_notes, 'delivery notes', required=False)
    patient.labor_room = None
    patient.save(update_fields=['status', 'delivered_at', 'baby_gender', 'delivery_notes', 'labor_room'])
    room = rooms.release(patient_id=patient.id)

    record_activity(user=actor, action=ActivityLog.Action.DELIVERY_COMPLETED,
                    details=f'{patient.full_name} delivered a {baby_gender} baby. SMS sent to next of kin.',
                    patient=patient)
    publish_change('patient', patient.id)
    send_sms(patient.next_of_kin_phone, message)
    logger.info('patient %s delivered; room %s released', patient.id, room.id if room else None)
    return DeliveryOutcome(patient=patient, room=room, message=message)


def list_patients(*, status: Optional[str] = None, nurse=None) -> list[Patient]:
    qs = Patient.objects.select_related('assigned_nurse', 'labor_room', 'registered_by')
    if status:
        qs = qs.filter(status=status)
    if nurse is not None:
        qs = qs.filter(assigned_nurse=nurse)
    return list(qs.order_by('-registered_at', '-id'))


def format_patient(p: Patient) -> dict:
    return {
        'id': p.id,
        'fullName': p.full_name,
        'deliveryDate': p.delivery_date.isoformat() if p.delivery_date else None,
        'nextOfKinName': p.next_of_kin_name,
        'nextOfKinPhone': p.next_of_kin_phone,
        'status': p.status,
        'assignedNurseId': p.assigned_nurse_id,
        'laborRoomId': p.labor_room_id,
        'registeredBy': p.registered_by_id,
        'registeredAt': p.registered_at.isoformat() if p.registered_at else None,
        'deliveredAt': p.delivered_at.isoformat() if p.delivered_at else None,
        'babyGender': p.baby_gender or None,
        'deliveryNotes': p.delivery_notes,
    }
