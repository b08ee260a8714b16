"""
Outgoing email: rendered HTML relayed through Django's mail backend.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from clinic.services.tokens import reset_link, verification_link

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str) -> int:
    """Send ``html`` to ``to``; SMTP errors propagate to the caller."""
    try:
        return send_mail(
            subject,
            strip_tags(html),
            settings.DEFAULT_FROM_EMAIL,
            [to],
            html_message=html,
        )
    except Exception:
        logger.exception("email to %s failed (%s)", to, subject)
        raise


def _minutes() -> int:
    return max(settings.TOKEN_EXPIRES_AT // 60, 1)


def send_verification_email(user, token) -> int:
    html = render_to_string('emails/verify.html', {
        'name': user.name,
        'email': user.email,
        'link': verification_link(token),
        'minutes': _minutes(),
    })
    return send_email(user.email, 'Confirm your email', html)


def send_reset_password_email(user, token) -> int:
    html = render_to_string('emails/reset_password.html', {
        'name': user.name,
        'email': user.email,
        'link': reset_link(token),
        'minutes': _minutes(),
    })
    return send_email(user.email, 'Reset your password', html)


def send_appointment_status_email(appointment) -> None:
    """Tell both the patient and the doctor about a status change."""
    template = f'emails/appointment_{appointment.status}.html'
    subject = f'Appointment {appointment.status}'
    doctor, patient = appointment.doctor, appointment.patient
    for recipient, address in ((patient.name or appointment.name, patient.email),
                               (doctor.name or doctor.email, doctor.email)):
        html = render_to_string(template, {
            'recipient': recipient,
            'appointment': appointment,
            'doctor': doctor,
            'slot': appointment.time_slot,
            'link': f"{settings.HOST}/appointments/{appointment.pk}",
        })
        send_email(address, subject, html)
