"""
Appointment endpoints.

Patients book against a doctor's time slot; doctors (or admins) confirm
or cancel, which emails both parties; a doctor only manages bookings
made with them.  Listing is scoped by role:
admins see everything, doctors their own bookings, patients their own.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import Appointment
from clinic.permissions import IsAdminRole, IsDoctorRole, is_admin, is_doctor
from clinic.serializers.appointments import (
    AppointmentSummarySerializer,
    BookingSerializer,
    StatusSerializer,
    appointment_payload,
)
from clinic.serializers.users import IdsSerializer
from clinic.services import appointments as appointment_service
from clinic.views.doctors import doctors_queryset
from clinic.views.listing import BadListParams, paginate, search


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def book(request, doctor_id: int):
    if not doctors_queryset().filter(pk=doctor_id).exists():
        return failure(messages.USER.NOT_FOUND, 404)
    s = BookingSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        appointment = appointment_service.book_appointment(
            doctor_id=doctor_id, patient=request.user, data=s.validated_data)
    except Exception as exc:
        return action_failure(exc)
    return success(messages.APPOINTMENT.CREATED, code=201, id=appointment.pk)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def list_appointments(request):
    """Appointments visible to the caller.

    Query params:
      - status: pending|confirmed|cancelled
      - q: search in patient name/email/city
      - page, pageSize: pagination (optional)
    """
    qs = appointment_service.visible_appointments(
        request.user, admin=is_admin(request), doctor=is_doctor(request))
    status_filter = request.query_params.get('status')
    if status_filter:
        qs = qs.filter(status=status_filter)
    qs = search(qs, request, ['name', 'email', 'city'])
    try:
        items, pagination = paginate(qs, request)
    except BadListParams:
        return invalid_inputs()
    return success(data=[appointment_payload(a) for a in items], pagination=pagination)


def _visible(request, appointment_id):
    return appointment_service.visible_appointments(
        request.user, admin=is_admin(request), doctor=is_doctor(request)).filter(pk=appointment_id).first()


def _foreign(request, appointment_id) -> bool:
    """An existing appointment booked with some other doctor."""
    if is_admin(request):
        return False
    return Appointment.objects.filter(pk=appointment_id).exclude(doctor=request.user).exists()


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def appointment_detail(request, appointment_id: int):
    if request.method == 'GET':
        appointment = _visible(request, appointment_id)
        if appointment is None:
            return failure(messages.APPOINTMENT.NOT_FOUND, 404)
        return success(appointment=appointment_payload(appointment))

    if not (is_admin(request) or is_doctor(request)) or _foreign(request, appointment_id):
        return failure(messages.AUTH.UNAUTHORIZED, 403)

    if request.method == 'DELETE':
        if not Appointment.objects.filter(pk=appointment_id).exists():
            return failure(messages.APPOINTMENT.NOT_FOUND, 404)
        appointment_service.delete_appointments([appointment_id])
        return success(messages.APPOINTMENT.DELETED)

    s = AppointmentSummarySerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        appointment_service.update_appointment(
            appointment_id, s.validated_data, reports=request.FILES.getlist('reports'))
    except Exception as exc:
        return action_failure(exc)
    return success(messages.APPOINTMENT.UPDATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsDoctorRole])
def update_status(request, appointment_id: int):
    if _foreign(request, appointment_id):
        return failure(messages.AUTH.UNAUTHORIZED, 403)
    s = StatusSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    new_status = s.validated_data['status']
    try:
        appointment_service.update_status(appointment_id, new_status)
    except Exception as exc:
        return action_failure(exc)
    if new_status == Appointment.STATUS_CONFIRMED:
        return success(messages.APPOINTMENT.CONFIRMED)
    return success(messages.APPOINTMENT.CANCELLED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def delete_appointments(request):
    s = IdsSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    appointment_service.delete_appointments(s.validated_data['ids'])
    return success(messages.APPOINTMENT.BULK_DELETED)
