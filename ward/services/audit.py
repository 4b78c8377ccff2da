from typing import Optional
from django.conf import settings
from django.contrib.auth import get_user_model
from ward.models import ActivityLog, Patient

User = get_user_model()


def record_activity(*, user: Optional[User], action: str, details: str = '', patient: Optional[Patient] = None) -> ActivityLog:
    return ActivityLog.objects.create(
        user=user if getattr(user, 'pk', None) else None,
        user_name=user.display_name if getattr(user, 'pk', None) else '',
        action=action,
        details=details,
        patient=patient,
    )


def recent_activity(limit: Optional[int] = None, *, patient_id=None, action: Optional[str] = None):
    qs = ActivityLog.objects.select_related('user')
    if patient_id:
        qs = qs.filter(patient_id=patient_id)
    if action:
        qs = qs.filter(action=action)
    return list(qs.order_by('-timestamp', '-id')[:limit or settings.ACTIVITY_LOG_LIMIT])


def format_activity(log: ActivityLog) -> dict:
    return {
        'id': log.id,
        'action': log.action,
        'details': log.details,
        'userId': log.user_id,
        'userName': log.user_name,
        'timestamp': log.timestamp.isoformat(),
        'patientId': log.patient_id,
    }
