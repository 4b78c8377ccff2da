from rest_framework import serializers

from ward.models import User


class UserCreateSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=User.Role.values)
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class UserUpdateSerializer(serializers.Serializer):
    id = serializers.IntegerField()
    name = serializers.CharField(max_length=150, required=False)
    role = serializers.ChoiceField(choices=User.Role.values, required=False)
    isActive = serializers.BooleanField(required=False)


class UserListQuerySerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.Role.values, required=False)
