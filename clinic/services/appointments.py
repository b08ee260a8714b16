"""
Appointment booking and status workflow.

Booking and status changes are only allowed while the slot still lies
at least ``SESSION_EXPIRES_AT`` seconds in the future.
"""
from __future__ import annotations

import logging
from datetime import date as date_type, datetime, timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Q
from django.utils import timezone

from clinic import messages
from clinic.exceptions import ActionError
from clinic.models import Appointment, TimeSlot
from clinic.services import files
from clinic.services.email import send_appointment_status_email

logger = logging.getLogger(__name__)


def slot_start(day: date_type, slot: TimeSlot) -> datetime:
    return timezone.make_aware(datetime.combine(day, slot.time), timezone.get_current_timezone())


def is_bookable(day: date_type, slot: Optional[TimeSlot], now: Optional[datetime] = None) -> bool:
    if slot is None:
        return False
    now = now or timezone.now()
    return slot_start(day, slot) - now >= timedelta(seconds=settings.SESSION_EXPIRES_AT)


def book_appointment(*, doctor_id, patient, data: dict) -> Appointment:
    slot = TimeSlot.objects.filter(pk=data['time_slot'], user_id=doctor_id).first()
    if not is_bookable(data['date'], slot):
        raise ActionError(messages.APPOINTMENT.INVALID_TIME_SLOT)

    exists = Appointment.objects.filter(
        doctor_id=doctor_id, patient=patient, date=data['date'], time_slot=slot,
    ).exists()
    if exists:
        raise ActionError(messages.APPOINTMENT.EXISTS)

    appointment = Appointment.objects.create(
        doctor_id=doctor_id,
        patient=patient,
        time_slot=slot,
        date=data['date'],
        name=data['name'],
        email=data['email'],
        phone=data.get('phone') or '',
        city=data.get('city') or '',
        notes=data.get('notes') or '',
    )
    logger.info("appointment booked id=%s doctor=%s patient=%s", appointment.pk, doctor_id, patient.pk)
    return appointment


def update_status(appointment_id, new_status: str) -> Appointment:
    appointment = (Appointment.objects.select_related('doctor', 'patient', 'time_slot')
                   .filter(pk=appointment_id).first())
    if appointment is None:
        raise ActionError(messages.APPOINTMENT.NOT_FOUND)
    if not is_bookable(appointment.date, appointment.time_slot):
        raise ActionError(messages.APPOINTMENT.ACTION_RESTRICTED)

    with transaction.atomic():
        appointment.status = new_status
        appointment.save(update_fields=['status', 'updated_at'])

    logger.info("appointment %s -> %s", appointment.pk, new_status)
    send_appointment_status_email(appointment)
    return appointment


def update_appointment(appointment_id, data: dict, reports=None) -> Appointment:
    """Overwrite an appointment's summary; new reports replace the old ones."""
    with transaction.atomic():
        appointment = Appointment.objects.select_for_update().filter(pk=appointment_id).first()
        if appointment is None:
            raise ActionError(messages.SYSTEM.BAD_REQUEST)

        if reports:
            stored = [files.save_file(report) for report in reports]
            for old in appointment.reports or []:
                files.remove_file(old)
            appointment.reports = stored

        for field in ('name', 'email', 'phone', 'city', 'date', 'notes', 'status',
                      'is_referred', 'doctor_id', 'patient_id', 'time_slot_id'):
            if field in data:
                setattr(appointment, field, data[field])
        appointment.save()
    return appointment


def visible_appointments(user, *, admin: bool, doctor: bool):
    qs = Appointment.objects.select_related('doctor', 'patient', 'time_slot').order_by('-date', '-created_at')
    if admin:
        return qs
    if doctor:
        return qs.filter(Q(doctor=user) | Q(patient=user))
    return qs.filter(patient=user)


def delete_appointments(ids) -> int:
    appointments = list(Appointment.objects.filter(pk__in=ids))
    with transaction.atomic():
        count, _ = Appointment.objects.filter(pk__in=[a.pk for a in appointments]).delete()
    for appointment in appointments:
        for report in appointment.reports or []:
            files.remove_file(report)
    return count
