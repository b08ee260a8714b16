from __future__ import annotations

from datetime import date, timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.utils import timezone

from clinic.constants import MONTHS
from clinic.models import Appointment, Speciality

User = get_user_model()


def format_change(current: int, previous: int) -> str:
    if not previous:
        return '+100%' if current else '+0%'
    change = (current - previous) / previous * 100
    return f"{'+' if change >= 0 else ''}{change:.0f}%"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n > 1 else ''}"


def _week_bounds(today: date):
    start = today - timedelta(days=today.weekday())
    return start, start + timedelta(days=6)


def _month_bounds(today: date):
    start = today.replace(day=1)
    next_month = (start + timedelta(days=32)).replace(day=1)
    prev_start = (start - timedelta(days=1)).replace(day=1)
    return prev_start, start, next_month


def monthly_users(year: int | None = None) -> list[dict]:
    year = year or timezone.localdate().year
    data = [{'month': m, 'users': 0} for m in MONTHS]
    for created in User.objects.filter(created_at__year=year).values_list('created_at', flat=True):
        data[timezone.localtime(created).month - 1]['users'] += 1
    return data


def monthly_appointments(user_id, year: int | None = None) -> list[dict]:
    year = year or timezone.localdate().year
    data = [{'month': m, 'appointments': 0} for m in MONTHS]
    qs = Appointment.objects.filter(patient_id=user_id, date__year=year).values_list('date', flat=True)
    for day in qs:
        data[day.month - 1]['appointments'] += 1
    return data


def admin_cards(today: date | None = None) -> list[dict]:
    today = today or timezone.localdate()
    week_start, week_end = _week_bounds(today)
    prev_week_start, prev_week_end = week_start - timedelta(days=7), week_end - timedelta(days=7)
    prev_month_start, month_start, next_month_start = _month_bounds(today)

    this_week = Appointment.objects.filter(date__range=(week_start, week_end))
    prev_week = Appointment.objects.filter(date__range=(prev_week_start, prev_week_end))
    pending = Appointment.objects.filter(status=Appointment.STATUS_PENDING).count()
    pending_prev_week = prev_week.filter(status=Appointment.STATUS_PENDING).count()

    doctors = User.objects.filter(user_roles__role__name=settings.DOCTOR_ROLE).distinct()
    doctors_this_month = doctors.filter(created_at__date__gte=month_start,
                                        created_at__date__lt=next_month_start).count()
    doctors_prev_month = doctors.filter(created_at__date__gte=prev_month_start,
                                        created_at__date__lt=month_start).count()
    doctor_count = doctors.count()

    cities = sorted({c for c in User.objects.exclude(city__isnull=True).exclude(city='')
                    .values_list('city', flat=True)})
    prev_cities = set(
        User.objects.filter(created_at__date__gte=prev_month_start, created_at__date__lt=month_start)
        .exclude(city__isnull=True).exclude(city='').values_list('city', flat=True)
    )

    return [
        {
            'title': str(this_week.count()),
            'action': format_change(this_week.count(), prev_week.count()),
            'description': 'Appointments This Week',
            'subtitle': 'Appointments scheduled this week',
            'summary': 'Week over week comparison',
        },
        {
            'title': str(doctor_count),
            'action': format_change(doctors_this_month, doctors_prev_month),
            'description': 'Active Doctors',
            'subtitle': f'{doctor_count} doctors currently registered',
            'summary': 'Change since last month',
        },
        {
            'title': str(pending),
            'action': format_change(pending, pending_prev_week),
            'description': 'Pending Appointments',
            'subtitle': f'{pending} awaiting confirmation',
            'summary': 'Pending bookings trend',
        },
        {
            'title': str(len(cities)),
            'action': format_change(len(cities), len(prev_cities)),
            'description': 'Cities Served',
            'subtitle': ', '.join(c.capitalize() for c in cities),
            'summary': 'Change in service coverage',
        },
    ]


def user_cards(user_id, today: date | None = None) -> list[dict]:
    today = today or timezone.localdate()
    appointments = list(Appointment.objects.filter(patient_id=user_id).values_list('date', 'status'))
    total = len(appointments) or 1
    upcoming = [a for a in appointments if a[0] > today and a[1] != Appointment.STATUS_CANCELLED]
    completed = [a for a in appointments if a[0] < today and a[1] == Appointment.STATUS_CONFIRMED]
    doctors = User.objects.filter(user_roles__role__name=settings.DOCTOR_ROLE).distinct().count()
    specialities = list(Speciality.objects.order_by('name').values_list('name', flat=True))

    return [
        {
            'title': str(doctors),
            'action': '+100%' if doctors else '+0%',
            'description': 'Available Doctors',
            'subtitle': f"{_plural(doctors, 'medical professional')}",
            'summary': 'Available for consultation',
        },
        {
            'title': str(len(completed)),
            'action': f"+{len(completed) / total * 100:.0f}%",
            'description': 'Completed Appointments',
            'subtitle': f"{_plural(len(completed), 'appointment')} completed",
            'summary': 'Track your healthcare history',
        },
        {
            'title': str(len(specialities)),
            'action': f'+{len(specialities)}',
            'description': 'Available Specialties',
            'subtitle': ', '.join(s.capitalize() for s in specialities),
            'summary': 'More expertise now available',
        },
        {
            'title': str(len(upcoming)),
            'action': f"+{len(upcoming) / total * 100:.0f}%",
            'description': 'Upcoming Appointments',
            'subtitle': f"You have {_plural(len(upcoming), 'upcoming appointment')}",
            'summary': 'Stay prepared for your next visit',
        },
    ]
