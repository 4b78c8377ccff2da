from rest_framework import serializers

from ward.models import Patient


class TemplateCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    content = serializers.CharField()
    isActive = serializers.BooleanField(required=False, default=True)


class TemplateUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(max_length=255, required=False)
    content = serializers.CharField(required=False)
    isActive = serializers.BooleanField(required=False)


class TemplateIdSerializer(serializers.Serializer):
    id = serializers.IntegerField()


class TemplatePreviewSerializer(serializers.Serializer):
    """Render either a stored template or ad-hoc ``content``."""
    templateId = serializers.IntegerField(required=False)
    content = serializers.CharField(required=False)
    patientId = serializers.IntegerField(required=False)
    babyGender = serializers.ChoiceField(choices=Patient.BabyGender.values, required=False)

    def validate(self, attrs):
        if not attrs.get('templateId') and not attrs.get('content'):
            raise serializers.ValidationError('templateId or content is required')
        return attrs


class TemplateListQuerySerializer(serializers.Serializer):
    active = serializers.BooleanField(required=False, default=False)
