from datetime import datetime
from typing import Optional

from django.utils import timezone

from ward.models import LaborRoom, Patient
from ward.services.audit import format_activity, recent_activity


def ward_stats(now: Optional[datetime] = None) -> dict:
    now = now or timezone.now()
    today = timezone.localtime(now).date()
    counts = {s: 0 for s in Patient.Status.values}
    for status in Patient.objects.values_list('status', flat=True):
        counts[status] = counts.get(status, 0) + 1
    delivered_today = sum(
        1 for ts in Patient.objects.filter(status=Patient.Status.DELIVERED, delivered_at__isnull=False)
        .values_list('delivered_at', flat=True)
        if timezone.localtime(ts).date() == today
    )
    occupied = LaborRoom.objects.filter(is_occupied=True).count()
    total_rooms = LaborRoom.objects.count()
    return {
        'totalPatients': sum(counts.values()),
        'registered': counts[Patient.Status.REGISTERED],
        'inLabor': counts[Patient.Status.IN_LABOR],
        'delivered': counts[Patient.Status.DELIVERED],
        'deliveredToday': delivered_today,
        'occupiedRooms': occupied,
        'availableRooms': total_rooms - occupied,
        'recentActivities': [format_activity(a) for a in recent_activity(5)],
    }
