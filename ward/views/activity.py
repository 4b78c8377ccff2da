from rest_framework import serializers
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ward.models import ActivityLog
from ward.permissions import IsAdminRole
from ward.services.audit import format_activity, recent_activity


class ActivityQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1, max_value=500)
    patientId = serializers.IntegerField(required=False)
    action = serializers.ChoiceField(choices=ActivityLog.Action.values, required=False)


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_activity(request):
    """Newest entries first."""
    q = ActivityQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    v = q.validated_data
    rows = recent_activity(v.get('limit'), patient_id=v.get('patientId'), action=v.get('action'))
    return Response({'ok': True, 'data': [format_activity(a) for a in rows]})
