from rest_framework import serializers

from clinic.serializers.fields import CleanCharField


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=1, trim_whitespace=False)

    def validate_email(self, v):
        return v.strip().lower()


class SignupSerializer(LoginSerializer):
    name = CleanCharField(min_length=1, max_length=255)
    password = serializers.CharField(min_length=8, trim_whitespace=False)


class EmailSerializer(serializers.Serializer):
    email = serializers.EmailField()

    def validate_email(self, v):
        return v.strip().lower()


class TokenSerializer(serializers.Serializer):
    token = serializers.UUIDField()


class CreatePasswordSerializer(TokenSerializer):
    password = serializers.CharField(min_length=8, trim_whitespace=False)


class GitHubCallbackSerializer(serializers.Serializer):
    code = serializers.CharField()
    state = serializers.CharField(required=False, allow_blank=True)
