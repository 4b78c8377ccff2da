"""
Database models for the maternity ward backend.

These models capture the ward's working state: staff users with a
closed set of roles, expectant patients moving through their lifecycle,
the labor rooms they occupy, the SMS templates used to notify next of
kin and the append-only activity log.  The patient and room invariants
are enforced with check constraints so that no code path can persist a
half-applied transition.
"""
from __future__ import annotations

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Ward staff member.

    Roles mirror the front-end roles: front desk staff register
    patients, labor nurses accept and deliver them, administrators
    manage users, rooms and templates.
    """

    class Role(models.TextChoices):
        ADMIN = 'admin', 'Administrator'
        FRONT_DESK = 'front_desk', 'Front desk'
        LABOR_NURSE = 'labor_nurse', 'Labor nurse'

    role = models.CharField(max_length=16, choices=Role.choices, default=Role.FRONT_DESK, db_index=True)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username

    def __str__(self) -> str:
        return f"{self.username} ({self.role})"


class LaborRoom(models.Model):
    """A labor room exclusively held by at most one patient at a time."""
    name = models.CharField(max_length=100, unique=True)
    is_occupied = models.BooleanField(default=False, db_index=True)
    assigned_nurse = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.PROTECT, related_name='labor_rooms'
    )
    # One-to-one: a patient can never be held by two rooms
    current_patient = models.OneToOneField(
        'Patient', null=True, blank=True, on_delete=models.PROTECT, related_name='current_room'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(is_occupied=True, current_patient__isnull=False)
                    | models.Q(is_occupied=False, current_patient__isnull=True)
                ),
                name='laborroom_occupied_iff_patient',
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Patient(models.Model):
    """An expectant mother tracked through registration, labor and delivery.

    While ``in_labor`` both the responsible nurse and the labor room are
    set.  After delivery the room is cleared and the delivering nurse is
    kept so that nurses can review their own deliveries.
    """

    class Status(models.TextChoices):
        REGISTERED = 'registered', 'Registered'
        IN_LABOR = 'in_labor', 'In labor'
        DELIVERED = 'delivered', 'Delivered'

    class BabyGender(models.TextChoices):
        MALE = 'male', 'Male'
        FEMALE = 'female', 'Female'

    full_name = models.CharField(max_length=255)
    delivery_date = models.DateField(null=True, blank=True)
    next_of_kin_name = models.CharField(max_length=255)
    next_of_kin_phone = models.CharField(max_length=32)
    status = models.CharField(max_length=16, choices=Status.choices, default=Status.REGISTERED, db_index=True)
    assigned_nurse = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.PROTECT, related_name='patients_in_care'
    )
    labor_room = models.ForeignKey(
        LaborRoom, null=True, blank=True, on_delete=models.PROTECT, related_name='+'
    )
    registered_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='registered_patients')
    registered_at = models.DateTimeField(auto_now_add=True, db_index=True)
    delivered_at = models.DateTimeField(null=True, blank=True)
    baby_gender = models.CharField(max_length=8, choices=BabyGender.choices, blank=True)
    delivery_notes = models.TextField(blank=True)

    class Meta:
        ordering = ['-registered_at', '-id']
        constraints = [
            models.CheckConstraint(
                condition=(
                    models.Q(status='registered', assigned_nurse__isnull=True, labor_room__isnull=True)
                    | models.Q(status='in_labor', assigned_nurse__isnull=False, labor_room__isnull=False)
                    | models.Q(
                        status='delivered',
                        labor_room__isnull=True,
                        delivered_at__isnull=False,
                        baby_gender__in=['male', 'female'],
                    )
                ),
                name='patient_status_consistent',
            ),
        ]

    def __str__(self) -> str:
        return f"{self.full_name} ({self.status})"


class MessageTemplate(models.Model):
    """SMS text sent to the next of kin once a delivery is completed.

    Templates are never hard-deleted; deactivating one hides it from
    the delivery form while keeping past references intact.
    """
    name = models.CharField(max_length=255)
    content = models.TextField()
    is_active = models.BooleanField(default=True, db_index=True)
    created_by = models.ForeignKey(
        User, null=True, blank=True, on_delete=models.SET_NULL, related_name='message_templates'
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self) -> str:
        return self.name


class ActivityLog(models.Model):
    """Append-only audit trail entry."""

    class Action(models.TextChoices):
        PATIENT_REGISTERED = 'Patient Registered'
        PATIENT_ACCEPTED = 'Patient Accepted'
        DELIVERY_COMPLETED = 'Delivery Completed'
        ROOM_CREATED = 'Room Created'
        ROOM_UPDATED = 'Room Updated'
        TEMPLATE_CREATED = 'Template Created'
        TEMPLATE_UPDATED = 'Template Updated'
        USER_CREATED = 'User Created'
        USER_UPDATED = 'User Updated'

    action = models.CharField(max_length=64, choices=Action.choices)
    details = models.TextField(blank=True)
    user = models.ForeignKey(User, null=True, blank=True, on_delete=models.SET_NULL, related_name='activity')
    # Snapshot so the log still reads correctly after a rename
    user_name = models.CharField(max_length=255, blank=True)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    patient = models.ForeignKey(
        Patient, null=True, blank=True, on_delete=models.SET_NULL, related_name='activity'
    )

    class Meta:
        ordering = ['-timestamp', '-id']
        indexes = [
            models.Index(fields=['action', 'timestamp'], name='ward_activity_action_ts_idx'),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ValueError('activity log entries are immutable')
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.action}:{self.user_id}@{self.timestamp:%F %T}"
