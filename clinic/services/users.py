"""
Account management: admin edits, self-service profile edits and doctors.

File fields (``image``, ``cover``, ``bio``) hold names produced by
:mod:`clinic.services.files`.  A replaced file is removed from storage;
an OAuth account's ``image`` is the provider's avatar URL and is never
removed from storage.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic import messages
from clinic.exceptions import ActionError
from clinic.models import Role, TimeSlot, Token, UserRole
from clinic.services import files

logger = logging.getLogger(__name__)

User = get_user_model()

PROFILE_FIELDS = ('name', 'city', 'phone', 'gender')
DOCTOR_FIELDS = PROFILE_FIELDS + ('experience', 'days_of_visit')


def email_taken(email: str, *, exclude_pk=None) -> bool:
    qs = User.objects.filter(email__iexact=email)
    if exclude_pk is not None:
        qs = qs.exclude(pk=exclude_pk)
    return qs.exists()


def dedupe_timings(timings) -> list[dict]:
    """Drop repeated slot times, keeping the first duration given."""
    seen = {}
    for t in timings or []:
        seen.setdefault(t['time'], t)
    return sorted(seen.values(), key=lambda t: t['time'])


def create_account(*, name: str, email: str, password: str | None, role_name: str, **extra):
    with transaction.atomic():
        user = User.objects.create_user(email=email, password=password, name=name, **extra)
        role, _ = Role.objects.get_or_create(name=role_name)
        UserRole.objects.create(user=user, role=role)
    return user


def update_user(user, data: dict):
    """Admin edit: name, email, optional password and verified flag."""
    email = data.get('email') or user.email
    if email_taken(email, exclude_pk=user.pk):
        raise ActionError(messages.USER.EMAIL_REGISTERED)
    with transaction.atomic():
        user.name = data.get('name', user.name)
        user.email = email
        if data.get('password'):
            user.set_password(data['password'])
        if 'email_verified' in data:
            user.email_verified = timezone.now() if data['email_verified'] else None
        user.save()
    return user


def toggle_email_verified(email: str):
    with transaction.atomic():
        user = User.objects.select_for_update().filter(email__iexact=email).first()
        if user is None:
            raise ActionError(messages.USER.NOT_FOUND, status_code=404)
        user.email_verified = None if user.email_verified else timezone.now()
        user.save(update_fields=['email_verified', 'updated_at'])
        Token.objects.filter(user=user).delete()
    return user


def _user_files(user) -> list[str]:
    names = [user.cover, user.bio]
    if not user.has_oauth:
        names.append(user.image)
    return [n for n in names if n]


def delete_users(ids) -> int:
    users = list(User.objects.filter(pk__in=ids))
    with transaction.atomic():
        count, _ = User.objects.filter(pk__in=[u.pk for u in users]).delete()
    for user in users:
        for name in _user_files(user):
            files.remove_file(name)
    logger.info("users deleted ids=%s", [u.pk for u in users])
    return count


def _replace_file(user, field: str, upload) -> None:
    if not upload:
        return
    new_name = files.save_file(upload)
    old_name = getattr(user, field)
    if old_name and not (field == 'image' and user.has_oauth):
        files.remove_file(old_name)
    setattr(user, field, new_name)


def update_profile(user, data: dict, *, image=None, cover=None, fields=PROFILE_FIELDS):
    """Self-service edit.  Returns ``(user, email_changed)``."""
    email = data.get('email') or user.email
    email_changed = email.lower() != user.email.lower()
    if email_changed and email_taken(email, exclude_pk=user.pk):
        raise ActionError(messages.USER.EMAIL_REGISTERED)

    with transaction.atomic():
        for field in fields:
            if data.get(field) not in (None, '', []):
                setattr(user, field, data[field])
        user.email = email
        if data.get('password'):
            user.set_password(data['password'])
        _replace_file(user, 'image', image)
        _replace_file(user, 'cover', cover)
        user.save()
    return user, email_changed


def update_bio(user, text: str):
    old = user.bio
    user.bio = files.save_text(text)
    user.save(update_fields=['bio', 'updated_at'])
    if old:
        files.remove_file(old)
    return user


def _set_timings(user, timings) -> None:
    TimeSlot.objects.filter(user=user).delete()
    TimeSlot.objects.bulk_create([
        TimeSlot(user=user, time=t['time'], duration=t['duration']) for t in dedupe_timings(timings)
    ])


def add_doctor(data: dict, *, image=None):
    if email_taken(data['email']):
        raise ActionError(messages.USER.EMAIL_REGISTERED)
    image_name = files.save_file(image) if image else None
    with transaction.atomic():
        doctor = create_account(
            name=data['name'],
            email=data['email'],
            password=data['password'],
            role_name=settings.DOCTOR_ROLE,
            image=image_name,
            **{f: data[f] for f in DOCTOR_FIELDS if f != 'name' and data.get(f) is not None},
        )
        if data.get('specialities'):
            doctor.specialities.set(data['specialities'])
        _set_timings(doctor, data.get('timings'))
    logger.info("doctor added id=%s", doctor.pk)
    return doctor


def update_doctor_profile(doctor, data: dict, *, image=None, cover=None):
    """Profile edit for doctors; specialities and timings are replaced when given."""
    with transaction.atomic():
        doctor, email_changed = update_profile(doctor, data, image=image, cover=cover, fields=DOCTOR_FIELDS)
        if 'specialities' in data:
            doctor.specialities.set(data['specialities'])
        if 'timings' in data:
            _set_timings(doctor, data['timings'])
    return doctor, email_changed


def user_payload(user) -> dict:
    return {
        'id': user.pk,
        'name': user.name,
        'email': user.email,
        'city': user.city,
        'phone': user.phone,
        'gender': user.gender,
        'image': user.image,
        'cover': user.cover,
        'hasOAuth': user.has_oauth,
        'emailVerified': user.email_verified.isoformat() if user.email_verified else None,
        'roles': [ur.role.name for ur in user.user_roles.all()],
        'createdAt': user.created_at.isoformat() if user.created_at else None,
    }


def doctor_payload(doctor) -> dict:
    return {
        **user_payload(doctor),
        'experience': doctor.experience,
        'daysOfVisit': doctor.days_of_visit,
        'bio': files.read_text(doctor.bio),
        'specialities': [{'id': s.pk, 'name': s.name} for s in doctor.specialities.all()],
        'timings': [
            {'id': t.pk, 'time': t.time.strftime('%H:%M'), 'duration': t.duration}
            for t in doctor.timings.all()
        ],
    }
