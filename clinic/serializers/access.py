from rest_framework import serializers

from clinic.serializers.fields import IdListField


class NameSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=1, max_length=100)

    def validate_name(self, v):
        v = v.strip()
        if not v:
            raise serializers.ValidationError('name is required')
        return v


class AssignRolesSerializer(serializers.Serializer):
    user = serializers.IntegerField(min_value=1)
    roles = IdListField(allow_empty=True)


class AssignPermissionsSerializer(serializers.Serializer):
    role = serializers.CharField(min_length=1)
    permissions = IdListField(allow_empty=True)
