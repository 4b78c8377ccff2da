"""
Message template endpoints.

Templates are managed by administrators; any signed-in user can list
them (the delivery form needs the active ones) and preview a rendering.
"""
from __future__ import annotations

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import NotFound
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from ward.models import Patient
from ward.permissions import IsAdminRole
from ward.serializers.template import (
    TemplateCreateSerializer,
    TemplateIdSerializer,
    TemplateListQuerySerializer,
    TemplatePreviewSerializer,
    TemplateUpdateSerializer,
)
from ward.services import templates


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_templates(request):
    q = TemplateListQuerySerializer(data=request.query_params)
    q.is_valid(raise_exception=True)
    rows = templates.list_templates(active_only=q.validated_data['active'])
    return Response({'ok': True, 'data': [templates.format_template(t) for t in rows]})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def create_template(request):
    s = TemplateCreateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    tpl = templates.create_template(request.user, name=v['name'], content=v['content'], is_active=v['isActive'])
    return Response({'ok': True, 'data': templates.format_template(tpl)}, status=status.HTTP_201_CREATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def update_template(request):
    s = TemplateUpdateSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    tpl = templates.update_template(
        request.user, v['id'], name=v.get('name'), content=v.get('content'), is_active=v.get('isActive'),
    )
    return Response({'ok': True, 'data': templates.format_template(tpl)})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def deactivate_template(request):
    s = TemplateIdSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    tpl = templates.deactivate_template(request.user, s.validated_data['id'])
    return Response({'ok': True, 'data': templates.format_template(tpl)})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def preview_template(request):
    """Render a template against a patient without sending anything."""
    s = TemplatePreviewSerializer(data=request.data)
    s.is_valid(raise_exception=True)
    v = s.validated_data
    source = templates.resolve_template(v['templateId']) if v.get('templateId') else v['content']
    patient = None
    if v.get('patientId'):
        patient = Patient.objects.filter(id=v['patientId']).first()
        if patient is None:
            raise NotFound(f"patient {v['patientId']} not found")
    text = templates.render(source, patient, {'babyGender': v.get('babyGender')})
    return Response({'ok': True, 'data': {'message': text}})
