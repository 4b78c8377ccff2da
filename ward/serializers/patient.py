from rest_framework import serializers

from ward.models import Patient


class PatientRegisterSerializer(serializers.Serializer):
    fullName = serializers.CharField(max_length=255)
    nextOfKinName = serializers.CharField(max_length=255)
    nextOfKinPhone = serializers.CharField(max_length=32)
    deliveryDate = serializers.DateField(required=False, allow_null=True)


class PatientAcceptSerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    roomId = serializers.IntegerField(required=False, allow_null=True)
    nurseId = serializers.IntegerField(required=False, allow_null=True)


class CompleteDeliverySerializer(serializers.Serializer):
    patientId = serializers.IntegerField()
    babyGender = serializers.ChoiceField(choices=Patient.BabyGender.values)
    deliveryNotes = serializers.CharField(required=False, allow_blank=True, default='')
    templateId = serializers.IntegerField()


class PatientListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Patient.Status.values, required=False)
    nurse = serializers.ChoiceField(choices=['me'], required=False)
