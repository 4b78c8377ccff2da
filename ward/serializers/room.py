from rest_framework import serializers


class RoomCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=100)


class RoomUpdateSerializer(serializers.Serializer):
    """Rename and/or (re)assign the nurse.  ``nurseId: null`` clears the nurse."""
    id = serializers.IntegerField()
    name = serializers.CharField(max_length=100, required=False)
    nurseId = serializers.IntegerField(required=False, allow_null=True)


class RoomListQuerySerializer(serializers.Serializer):
    available = serializers.BooleanField(required=False, default=False)
