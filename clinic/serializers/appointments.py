from rest_framework import serializers

from clinic.models import Appointment
from clinic.serializers.fields import CleanCharField, YesNoField


class BookingSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    city = CleanCharField(required=False, allow_blank=True, max_length=100)
    date = serializers.DateField()
    time_slot = serializers.IntegerField(min_value=1)
    notes = CleanCharField(required=False, allow_blank=True, max_length=5000)


class StatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[Appointment.STATUS_CONFIRMED, Appointment.STATUS_CANCELLED])


class AppointmentSummarySerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField()
    phone = CleanCharField(required=False, allow_blank=True, max_length=32)
    city = CleanCharField(required=False, allow_blank=True, max_length=100)
    date = serializers.DateField()
    notes = CleanCharField(required=False, allow_blank=True, max_length=5000)
    status = serializers.ChoiceField(choices=[c for c, _ in Appointment.STATUS_CHOICES], required=False)
    is_referred = YesNoField(required=False)
    doctor_id = serializers.IntegerField(required=False, min_value=1)
    patient_id = serializers.IntegerField(required=False, min_value=1)
    time_slot_id = serializers.IntegerField(required=False, min_value=1)


def appointment_payload(a: Appointment) -> dict:
    slot = a.time_slot
    return {
        'id': a.pk,
        'name': a.name,
        'email': a.email,
        'phone': a.phone,
        'city': a.city,
        'date': a.date.isoformat(),
        'notes': a.notes,
        'status': a.status,
        'isReferred': a.is_referred,
        'reports': a.reports,
        'doctor': {'id': a.doctor_id, 'name': a.doctor.name, 'email': a.doctor.email},
        'patient': {'id': a.patient_id, 'name': a.patient.name, 'email': a.patient.email},
        'timeSlot': {'id': slot.pk, 'time': slot.time.strftime('%H:%M'), 'duration': slot.duration} if slot else None,
    }
