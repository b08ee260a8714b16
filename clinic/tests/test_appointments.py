from datetime import datetime, time, timedelta

import pytest
from django.conf import settings
from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone

from clinic import messages
from clinic.models import Appointment, TimeSlot
from clinic.services.appointments import is_bookable

pytestmark = pytest.mark.django_db


@pytest.fixture
def doctor(make_user):
    user = make_user('doc@example.com', roles=[settings.DOCTOR_ROLE], name='Dr. Who')
    TimeSlot.objects.create(user=user, time=time(10, 0), duration=30)
    return user


@pytest.fixture
def slot(doctor):
    return doctor.timings.get()


@pytest.fixture
def patient(make_user):
    return make_user('pat@example.com', roles=[settings.DEFAULT_ROLE], name='Pat')


def _future():
    return timezone.localdate() + timedelta(days=2)


def _booking(slot, day=None, **extra):
    return {'name': 'Pat', 'email': 'pat@example.com', 'phone': '0300', 'city': 'Lahore',
            'date': (day or _future()).isoformat(), 'time_slot': slot.pk, **extra}


def _appointment(doctor, patient, slot, day=None, **extra):
    return Appointment.objects.create(doctor=doctor, patient=patient, time_slot=slot,
                                      date=day or _future(), name='Pat', email='pat@example.com', **extra)


def test_is_bookable_needs_lead_time(slot):
    day = timezone.localdate()
    start = timezone.make_aware(datetime.combine(day, slot.time))
    lead = timedelta(seconds=settings.SESSION_EXPIRES_AT)

    assert is_bookable(day, slot, now=start - lead)
    assert not is_bookable(day, slot, now=start - lead + timedelta(seconds=1))
    assert not is_bookable(day, None)


def test_book_appointment(session_client, patient, doctor, slot):
    resp = session_client(patient).post(reverse('book_appointment', args=[doctor.pk]),
                                        _booking(slot, notes='<script>x</script>headache'), format='json')

    assert resp.status_code == 201
    appointment = Appointment.objects.get(pk=resp.json()['id'])
    assert appointment.status == Appointment.STATUS_PENDING
    assert appointment.patient == patient
    assert '<script>' not in appointment.notes


def test_book_same_slot_twice(session_client, patient, doctor, slot):
    c = session_client(patient)
    url = reverse('book_appointment', args=[doctor.pk])
    c.post(url, _booking(slot), format='json')

    resp = c.post(url, _booking(slot), format='json')

    assert resp.status_code == 400
    assert resp.json()['message'] == messages.APPOINTMENT.EXISTS


def test_book_past_slot(session_client, patient, doctor, slot):
    yesterday = timezone.localdate() - timedelta(days=1)
    resp = session_client(patient).post(reverse('book_appointment', args=[doctor.pk]),
                                        _booking(slot, day=yesterday), format='json')
    assert resp.json()['message'] == messages.APPOINTMENT.INVALID_TIME_SLOT


def test_book_slot_of_another_doctor(session_client, patient, doctor, make_user):
    other = make_user('other@example.com', roles=[settings.DOCTOR_ROLE])
    foreign = TimeSlot.objects.create(user=other, time=time(11, 0))
    resp = session_client(patient).post(reverse('book_appointment', args=[doctor.pk]),
                                        _booking(foreign), format='json')
    assert resp.json()['message'] == messages.APPOINTMENT.INVALID_TIME_SLOT


def test_book_with_non_doctor(session_client, patient, slot):
    resp = session_client(patient).post(reverse('book_appointment', args=[patient.pk]),
                                        _booking(slot), format='json')
    assert resp.status_code == 404


def test_doctor_confirms_and_both_parties_are_emailed(session_client, doctor, patient, slot):
    appointment = _appointment(doctor, patient, slot)

    resp = session_client(doctor).post(reverse('appointment_status', args=[appointment.pk]),
                                       {'status': 'confirmed'}, format='json')

    assert resp.status_code == 200
    assert resp.json()['message'] == messages.APPOINTMENT.CONFIRMED
    appointment.refresh_from_db()
    assert appointment.status == Appointment.STATUS_CONFIRMED
    assert sorted(m.to[0] for m in mail.outbox) == ['doc@example.com', 'pat@example.com']


def test_status_change_too_close_to_slot(session_client, doctor, patient, slot):
    appointment = _appointment(doctor, patient, slot, day=timezone.localdate() - timedelta(days=1))
    resp = session_client(doctor).post(reverse('appointment_status', args=[appointment.pk]),
                                       {'status': 'cancelled'}, format='json')
    assert resp.json()['message'] == messages.APPOINTMENT.ACTION_RESTRICTED
    assert mail.outbox == []


def test_patient_cannot_change_status(session_client, doctor, patient, slot):
    appointment = _appointment(doctor, patient, slot)
    resp = session_client(patient).post(reverse('appointment_status', args=[appointment.pk]),
                                        {'status': 'confirmed'}, format='json')
    assert resp.status_code == 403


def test_listing_is_scoped_by_role(session_client, doctor, patient, slot, make_user, admin_client):
    stranger = make_user('x@example.com', roles=[settings.DEFAULT_ROLE])
    _appointment(doctor, patient, slot)
    url = reverse('appointments')

    assert len(session_client(patient).get(url).json()['data']) == 1
    assert len(session_client(doctor).get(url).json()['data']) == 1
    assert session_client(stranger).get(url).json()['data'] == []
    assert admin_client.get(url).json()['pagination']['total'] == 1


def test_listing_rejects_bad_paging(session_client, patient):
    resp = session_client(patient).get(reverse('appointments'), {'page': 'x'})
    assert resp.json()['message'] == messages.SYSTEM.INVALID_INPUTS


def test_update_summary_replaces_reports(session_client, doctor, patient, slot):
    appointment = _appointment(doctor, patient, slot)
    c = session_client(doctor)
    url = reverse('appointment_detail', args=[appointment.pk])
    data = {'name': 'Pat', 'email': 'pat@example.com', 'date': _future().isoformat(),
            'notes': 'fine', 'is_referred': 'yes'}

    first = c.put(url, {**data, 'reports': SimpleUploadedFile('a.pdf', b'%PDF-1', 'application/pdf')},
                  format='multipart')
    assert first.status_code == 200
    appointment.refresh_from_db()
    old_reports = appointment.reports
    assert len(old_reports) == 1 and appointment.is_referred

    c.put(url, {**data, 'reports': SimpleUploadedFile('b.pdf', b'%PDF-2', 'application/pdf')},
          format='multipart')
    appointment.refresh_from_db()
    assert len(appointment.reports) == 1
    assert appointment.reports != old_reports


def test_bulk_delete_is_admin_only(session_client, admin_client, doctor, patient, slot):
    appointment = _appointment(doctor, patient, slot)
    url = reverse('appointments_delete')

    assert session_client(doctor).post(url, {'ids': [appointment.pk]}, format='json').status_code == 403
    resp = admin_client.post(url, {'ids': [appointment.pk]}, format='json')
    assert resp.json()['message'] == messages.APPOINTMENT.BULK_DELETED
    assert not Appointment.objects.exists()


def test_doctor_cannot_manage_another_doctors_appointment(session_client, doctor, patient, slot, make_user):
    appointment = _appointment(doctor, patient, slot)
    other = session_client(make_user('doc2@example.com', roles=[settings.DOCTOR_ROLE], name='Dr. Two'))
    url = reverse('appointment_detail', args=[appointment.pk])

    resp = other.put(url, {'name': 'Someone else', 'email': 'pat@example.com',
                           'date': _future().isoformat()}, format='json')
    assert resp.status_code == 403
    resp = other.post(reverse('appointment_status', args=[appointment.pk]), {'status': 'cancelled'},
                      format='json')
    assert resp.status_code == 403
    assert other.delete(url).status_code == 403

    appointment.refresh_from_db()
    assert (appointment.name, appointment.status) == ('Pat', Appointment.STATUS_PENDING)
    assert mail.outbox == []


def test_admin_manages_any_appointment(admin_client, doctor, patient, slot):
    appointment = _appointment(doctor, patient, slot)

    resp = admin_client.delete(reverse('appointment_detail', args=[appointment.pk]))

    assert resp.json()['message'] == messages.APPOINTMENT.DELETED
    assert not Appointment.objects.exists()
