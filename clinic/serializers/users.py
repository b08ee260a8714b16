from rest_framework import serializers

from clinic.constants import DAYS
from clinic.models import User
from clinic.serializers.fields import CleanCharField, IdListField, YesNoField


class UserUpdateSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    password = serializers.CharField(required=False, allow_blank=True, min_length=8, trim_whitespace=False)
    email_verified = YesNoField(required=False)


class ProfileSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    city = CleanCharField(required=False, allow_blank=True, max_length=100)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    gender = serializers.ChoiceField(choices=[c for c, _ in User.GENDER_CHOICES], required=False, allow_blank=True)
    password = serializers.CharField(required=False, allow_blank=True, min_length=8, trim_whitespace=False)


class TimingSerializer(serializers.Serializer):
    time = serializers.TimeField(input_formats=['%H:%M', '%H:%M:%S'])
    duration = serializers.IntegerField(min_value=5, max_value=240)


class DoctorProfileSerializer(ProfileSerializer):
    experience = serializers.IntegerField(required=False, min_value=0, max_value=80)
    days_of_visit = serializers.ListField(
        child=serializers.ChoiceField(choices=DAYS), required=False, allow_empty=True)
    specialities = IdListField(required=False, allow_empty=True)
    timings = TimingSerializer(many=True, required=False)


class DoctorSerializer(DoctorProfileSerializer):
    password = serializers.CharField(min_length=8, trim_whitespace=False)
    timings = TimingSerializer(many=True, allow_empty=False)


class BioSerializer(serializers.Serializer):
    bio = serializers.CharField(max_length=20000, trim_whitespace=False)


class IdsSerializer(serializers.Serializer):
    ids = IdListField(allow_empty=False)
