"""
Administrative dashboard endpoint.

Returns the ward counters shown on the admin landing page together with
the five most recent activity entries.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ward.permissions import IsAdminRole
from ward.services.stats import ward_stats


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def admin_dashboard(request):
    return Response({'ok': True, 'data': ward_stats()})
