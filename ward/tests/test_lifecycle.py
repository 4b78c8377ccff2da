"""
Service level tests for the patient lifecycle.

They exercise register -> accept -> complete delivery directly through
:mod:`ward.services.patients`, checking that patient and room rows
always move together.
"""
from datetime import datetime, timezone as dt_timezone

import pytest
from rest_framework.exceptions import NotFound

from ward.exceptions import (
    InvalidTransitionError,
    NotificationError,
    RoomUnavailableError,
    TemplateNotFoundError,
    ValidationError,
)
from ward.models import ActivityLog, LaborRoom, Patient
from ward.services import notifications
from ward.services import patients as lifecycle

pytestmark = pytest.mark.django_db

MOMENT = datetime(2024, 5, 1, 14, 30, tzinfo=dt_timezone.utc)


def _register(actor, name='Jane Doe'):
    return lifecycle.register_patient(
        actor, full_name=name, next_of_kin_name='John Doe', next_of_kin_phone='555-1234',
    )


def _assert_pairing():
    """in_labor iff exactly one room holds the patient."""
    for p in Patient.objects.all():
        holders = LaborRoom.objects.filter(current_patient=p).count()
        assert (p.status == Patient.Status.IN_LABOR) == (holders == 1)
        assert holders <= 1


def test_full_delivery_example(settings, front_desk, nurse, room, template):
    settings.TIME_ZONE = 'UTC'
    patient = _register(front_desk)
    assert patient.status == Patient.Status.REGISTERED
    assert patient.assigned_nurse_id is None

    patient = lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=room.id)
    room.refresh_from_db()
    assert patient.status == Patient.Status.IN_LABOR
    assert room.is_occupied and room.current_patient_id == patient.id
    assert room.assigned_nurse_id == nurse.id == patient.assigned_nurse_id
    _assert_pairing()

    outcome = lifecycle.complete_delivery(
        nurse, patient_id=patient.id, baby_gender='female', template_id=template.id, now=MOMENT,
    )
    assert outcome.message == 'Hello John Doe, Jane Doe delivered a female baby at 2024-05-01 14:30.'
    patient.refresh_from_db()
    room.refresh_from_db()
    assert patient.status == Patient.Status.DELIVERED
    assert patient.delivered_at == MOMENT
    assert patient.baby_gender == 'female'
    assert patient.labor_room_id is None
    assert patient.assigned_nurse_id == nurse.id
    assert not room.is_occupied and room.current_patient_id is None and room.assigned_nurse_id is None
    _assert_pairing()

    assert [(m.phone, m.text) for m in notifications.outbox] == [('555-1234', outcome.message)]
    actions = list(ActivityLog.objects.order_by('id').values_list('action', flat=True))
    assert actions == [
        ActivityLog.Action.PATIENT_REGISTERED,
        ActivityLog.Action.PATIENT_ACCEPTED,
        ActivityLog.Action.DELIVERY_COMPLETED,
    ]
    last = ActivityLog.objects.order_by('-id').first()
    assert last.patient_id == patient.id
    assert last.user_name == 'Lisa Brown'
    assert last.details == 'Jane Doe delivered a female baby. SMS sent to next of kin.'


def test_register_requires_fields(front_desk):
    with pytest.raises(ValidationError):
        lifecycle.register_patient(front_desk, full_name='  ', next_of_kin_name='John', next_of_kin_phone='1')
    with pytest.raises(ValidationError):
        lifecycle.register_patient(front_desk, full_name='Jane', next_of_kin_name='<i></i>', next_of_kin_phone='1')
    assert not Patient.objects.exists()
    assert not ActivityLog.objects.exists()


def test_accept_into_occupied_room_changes_nothing(front_desk, nurse, other_nurse, room):
    first = _register(front_desk)
    second = _register(front_desk, name='Ann Roe')
    lifecycle.accept_patient_into_room(nurse, patient_id=first.id, room_id=room.id)

    with pytest.raises(RoomUnavailableError):
        lifecycle.accept_patient_into_room(other_nurse, patient_id=second.id, room_id=room.id)

    second.refresh_from_db()
    room.refresh_from_db()
    assert second.status == Patient.Status.REGISTERED
    assert second.assigned_nurse_id is None and second.labor_room_id is None
    assert room.current_patient_id == first.id and room.assigned_nurse_id == nurse.id
    assert ActivityLog.objects.filter(action=ActivityLog.Action.PATIENT_ACCEPTED).count() == 1
    _assert_pairing()


def test_accept_twice_is_invalid_transition(front_desk, nurse, room):
    spare = LaborRoom.objects.create(name='Room 3')
    patient = _register(front_desk)
    lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=room.id)
    with pytest.raises(InvalidTransitionError):
        lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=spare.id)
    spare.refresh_from_db()
    assert not spare.is_occupied
    _assert_pairing()


def test_accept_requires_labor_nurse(front_desk, admin_user, room):
    patient = _register(front_desk)
    with pytest.raises(ValidationError):
        lifecycle.accept_patient_into_room(admin_user, patient_id=patient.id, room_id=room.id)
    room.refresh_from_db()
    assert not room.is_occupied


def test_accept_unknown_patient(nurse, room):
    with pytest.raises(NotFound):
        lifecycle.accept_patient_into_room(nurse, patient_id=999, room_id=room.id)


def test_complete_requires_in_labor(front_desk, nurse, template):
    patient = _register(front_desk)
    with pytest.raises(InvalidTransitionError):
        lifecycle.complete_delivery(nurse, patient_id=patient.id, baby_gender='male', template_id=template.id)
    assert notifications.outbox == []


def test_bad_template_leaves_state_unchanged(front_desk, nurse, room, template):
    patient = _register(front_desk)
    lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=room.id)
    template.is_active = False
    template.save()

    for template_id in (template.id, 12345):
        with pytest.raises(TemplateNotFoundError):
            lifecycle.complete_delivery(nurse, patient_id=patient.id, baby_gender='male', template_id=template_id)

    patient.refresh_from_db()
    room.refresh_from_db()
    assert patient.status == Patient.Status.IN_LABOR
    assert room.current_patient_id == patient.id
    assert notifications.outbox == []
    assert not ActivityLog.objects.filter(action=ActivityLog.Action.DELIVERY_COMPLETED).exists()


def test_invalid_gender_rejected(front_desk, nurse, room, template):
    patient = _register(front_desk)
    lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=room.id)
    with pytest.raises(ValidationError):
        lifecycle.complete_delivery(nurse, patient_id=patient.id, baby_gender='unknown', template_id=template.id)


def test_sms_failure_rolls_back_delivery(settings, front_desk, nurse, room, template):
    settings.SMS_BACKEND = 'ward.services.notifications.HttpSmsBackend'
    settings.SMS_GATEWAY_URL = ''
    patient = _register(front_desk)
    lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=room.id)

    with pytest.raises(NotificationError):
        lifecycle.complete_delivery(nurse, patient_id=patient.id, baby_gender='male', template_id=template.id)

    patient.refresh_from_db()
    room.refresh_from_db()
    assert patient.status == Patient.Status.IN_LABOR
    assert room.is_occupied and room.current_patient_id == patient.id
    _assert_pairing()


def test_room_can_be_reused_after_delivery(front_desk, nurse, room, template):
    for name in ('Jane Doe', 'Ann Roe'):
        patient = _register(front_desk, name=name)
        lifecycle.accept_patient_into_room(nurse, patient_id=patient.id, room_id=room.id)
        lifecycle.complete_delivery(nurse, patient_id=patient.id, baby_gender='male', template_id=template.id)
    assert Patient.objects.filter(status=Patient.Status.DELIVERED).count() == 2
    assert len(notifications.outbox) == 2
    _assert_pairing()


def test_list_patients_filters(front_desk, nurse, room):
    a = _register(front_desk)
    _register(front_desk, name='Ann Roe')
    lifecycle.accept_patient_into_room(nurse, patient_id=a.id, room_id=room.id)
    assert [p.id for p in lifecycle.list_patients(nurse=nurse)] == [a.id]
    assert len(lifecycle.list_patients(status=Patient.Status.REGISTERED)) == 1


def test_transition_table():
    assert lifecycle.can_transition('registered', 'in_labor')
    assert lifecycle.can_transition('in_labor', 'delivered')
    assert not lifecycle.can_transition('registered', 'delivered')
    assert not lifecycle.can_transition('delivered', 'in_labor')


def test_activity_log_is_append_only(front_desk):
    _register(front_desk)
    entry = ActivityLog.objects.get()
    entry.details = 'changed'
    with pytest.raises(ValueError):
        entry.save()


def test_register_never_stores_markup(front_desk):
    with pytest.raises(ValidationError):
        lifecycle.register_patient(front_desk, full_name='<b></b>', next_of_kin_name='John', next_of_kin_phone='1')
    patient = lifecycle.register_patient(
        front_desk, full_name='&lt;img src=x onerror=alert(1)&gt;Jane Doe',
        next_of_kin_name='John & Co', next_of_kin_phone='555-1234',
    )
    patient.refresh_from_db()
    assert patient.full_name == 'Jane Doe'
    assert patient.next_of_kin_name == 'John & Co'
