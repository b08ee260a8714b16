"""
Serializers for the hospital directory and pharmacy reference tables.

Uniqueness is left to the database so that duplicates surface as the
"record already exists" message rather than a validation error.
"""
from rest_framework import serializers

from clinic.models import (
    Department,
    Facility,
    Hospital,
    MedicationForm,
    PharmaBrand,
    PharmaCode,
    PharmaManufacturer,
    PharmaSalt,
    Speciality,
    User,
)
from clinic.serializers.fields import CleanCharField, YesNoField


class ReferenceSerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=255, validators=[])
    description = CleanCharField(required=False, allow_blank=True, max_length=5000)

    class Meta:
        fields = ['id', 'name', 'description', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


def reference_serializer(model):
    meta = type('Meta', (ReferenceSerializer.Meta,), {'model': model})
    return type(f'{model.__name__}Serializer', (ReferenceSerializer,), {'Meta': meta})


DepartmentSerializer = reference_serializer(Department)
MedicationFormSerializer = reference_serializer(MedicationForm)
PharmaBrandSerializer = reference_serializer(PharmaBrand)
PharmaSaltSerializer = reference_serializer(PharmaSalt)
PharmaManufacturerSerializer = reference_serializer(PharmaManufacturer)


class FacilitySerializer(ReferenceSerializer):
    departments = serializers.PrimaryKeyRelatedField(
        queryset=Department.objects.all(), many=True, required=False)

    class Meta(ReferenceSerializer.Meta):
        model = Facility
        fields = ReferenceSerializer.Meta.fields + ['departments']


class SpecialitySerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=100, validators=[])

    class Meta:
        model = Speciality
        fields = ['id', 'name', 'created_at']
        read_only_fields = ['created_at']


class PharmaCodeSerializer(serializers.ModelSerializer):
    code = CleanCharField(max_length=64, validators=[])
    description = CleanCharField(required=False, allow_blank=True, max_length=5000)
    frequency = CleanCharField(required=False, allow_blank=True, max_length=64)

    class Meta:
        model = PharmaCode
        fields = ['id', 'code', 'description', 'frequency', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class HospitalSerializer(serializers.ModelSerializer):
    name = CleanCharField(max_length=255)
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    city = CleanCharField(required=False, allow_blank=True, max_length=100)
    address = CleanCharField(required=False, allow_blank=True, max_length=512)
    is_affiliated = YesNoField(required=False)
    doctors = serializers.PrimaryKeyRelatedField(queryset=User.objects.all(), many=True, required=False)

    class Meta:
        model = Hospital
        fields = ['id', 'name', 'email', 'phone', 'city', 'address', 'is_affiliated', 'doctors',
                  'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
