import logging
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from rest_framework.exceptions import NotFound

from ward.exceptions import ValidationError
from ward.models import ActivityLog, Patient
from ward.services.audit import record_activity
from ward.services.broadcast import publish_change
from ward.services.sanitize import clean_text

logger = logging.getLogger(__name__)

User = get_user_model()


def _split_name(name: str) -> tuple[str, str]:
    first, _, last = name.partition(' ')
    return first, last.strip()


def _ensure_role(role: str) -> str:
    if role not in User.Role.values:
        raise ValidationError(f'role must be one of {", ".join(User.Role.values)}')
    return role


@transaction.atomic
def create_staff_user(actor, *, name: str, email: str, role: str, password: str) -> User:
    name = clean_text(name, 'name')
    email = clean_text(email, 'email').lower()
    _ensure_role(role)
    if User.objects.filter(username__iexact=email).exists():
        raise ValidationError(f'a user with email {email} already exists')
    first, last = _split_name(name)
    candidate = User(username=email, email=email, first_name=first, last_name=last, role=role)
    try:
        validate_password(password, user=candidate)
    except DjangoValidationError as e:
        raise ValidationError({'password': e.messages})
    candidate.set_password(password)
    candidate.save()
    record_activity(user=actor, action=ActivityLog.Action.USER_CREATED,
                    details=f'User {candidate.display_name} created as {candidate.get_role_display()}')
    publish_change('user', candidate.id)
    logger.info('user %s created with role %s', candidate.username, role)
    return candidate


@transaction.atomic
def update_staff_user(actor, user_id, *, name: Optional[str] = None, role: Optional[str] = None,
                      is_active: Optional[bool] = None) -> User:
    try:
        user = User.objects.select_for_update().get(id=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound(f'user {user_id} not found')
    changed = []
    leaving_labor = (
        (is_active is False and user.is_active)
        or (role is not None and role != user.role and user.role == User.Role.LABOR_NURSE)
    )
    if leaving_labor and Patient.objects.filter(assigned_nurse=user, status=Patient.Status.IN_LABOR).exists():
        raise ValidationError(f'{user.display_name} is responsible for a patient in labor')
    if name is not None:
        user.first_name, user.last_name = _split_name(clean_text(name, 'name'))
        changed.append('name')
    if role is not None and role != user.role:
        user.role = _ensure_role(role)
        changed.append(f'role={role}')
    if is_active is not None and is_active != user.is_active:
        user.is_active = is_active
        changed.append('activated' if is_active else 'deactivated')
    if not changed:
        return user
    user.save()
    record_activity(user=actor, action=ActivityLog.Action.USER_UPDATED,
                    details=f'User {user.display_name} updated: {", ".join(changed)}')
    publish_change('user', user.id)
    return user


def list_staff(*, role: Optional[str] = None) -> list:
    qs = User.objects.all()
    if role:
        qs = qs.filter(role=role)
    return list(qs.order_by('role', 'first_name', 'username'))


def format_user(u) -> dict:
    return {
        'id': u.id,
        'name': u.display_name,
        'email': u.email,
        'role': u.role,
        'isActive': u.is_active,
        'createdAt': u.date_joined.isoformat() if u.date_joined else None,
    }
