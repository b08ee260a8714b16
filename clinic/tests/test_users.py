import pytest
from django.conf import settings
from django.core import mail
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from clinic import messages
from clinic.models import Speciality, Token, User
from clinic.services.claims import SessionToken
from clinic.services.tokens import generate_token
from clinic.services.users import dedupe_timings, delete_users

pytestmark = pytest.mark.django_db


def _png(name='a.png'):
    return SimpleUploadedFile(name, b'\x89PNG\r\n', content_type='image/png')


def test_dedupe_timings_keeps_first_per_time():
    timings = [{'time': '10:00', 'duration': 30}, {'time': '09:00', 'duration': 15},
               {'time': '10:00', 'duration': 60}]
    assert dedupe_timings(timings) == [{'time': '09:00', 'duration': 15}, {'time': '10:00', 'duration': 30}]


def test_list_users_search_and_paging(admin_client, make_user):
    make_user('pat@example.com', name='Pat', city='Lahore')
    make_user('sam@example.com', name='Sam', city='Karachi')

    resp = admin_client.get(reverse('users'), {'q': 'lahore'})
    assert [u['email'] for u in resp.json()['data']] == ['pat@example.com']

    resp = admin_client.get(reverse('users'), {'page': 1, 'pageSize': 2})
    body = resp.json()
    assert body['pagination'] == {'total': 3, 'page': 1, 'pageSize': 2}
    assert len(body['data']) == 2


def test_admin_edits_user(admin_client, make_user):
    pat = make_user('pat@example.com', verified=False)
    resp = admin_client.put(reverse('user_detail', args=[pat.pk]),
                            {'name': 'Patricia', 'email': 'patricia@example.com', 'email_verified': 'yes'},
                            format='json')
    assert resp.json()['message'] == messages.USER.PROFILE_UPDATED
    pat.refresh_from_db()
    assert (pat.name, pat.email) == ('Patricia', 'patricia@example.com')
    assert pat.email_verified is not None


def test_admin_edit_rejects_taken_email(admin_client, make_user):
    pat = make_user('pat@example.com')
    make_user('sam@example.com')
    resp = admin_client.put(reverse('user_detail', args=[pat.pk]),
                            {'name': 'Pat', 'email': 'sam@example.com'}, format='json')
    assert resp.json()['message'] == messages.USER.EMAIL_REGISTERED


def test_toggle_verified_drops_pending_token(admin_client, make_user):
    pat = make_user('pat@example.com', verified=False)
    generate_token(pat.pk)

    resp = admin_client.post(reverse('users_verify'), {'email': 'pat@example.com'}, format='json')

    assert resp.json()['emailVerified'] is True
    assert not Token.objects.filter(user=pat).exists()
    resp = admin_client.post(reverse('users_verify'), {'email': 'pat@example.com'}, format='json')
    assert resp.json()['emailVerified'] is False


def test_toggle_verified_unknown_email(admin_client):
    resp = admin_client.post(reverse('users_verify'), {'email': 'nobody@example.com'}, format='json')
    assert resp.status_code == 404


def test_delete_users_removes_files_but_keeps_oauth_avatar(make_user):
    cover = default_storage.save(f'{settings.USER_DIR}/cover.png', _png())
    pat = make_user('pat@example.com', cover=cover.split('/')[-1], image='https://avatars.example.com/1',
                    has_oauth=True)

    assert delete_users([pat.pk]) == 1
    assert not default_storage.exists(cover)


def test_profile_update_pushes_session(session_client, make_user):
    pat = make_user('pat@example.com', roles=[settings.DEFAULT_ROLE], name='Pat')
    c = session_client(pat)

    resp = c.put(reverse('profile'), {'name': 'Pat', 'email': 'pat@example.com', 'city': 'Lahore',
                                      'image': _png()}, format='multipart')

    assert resp.status_code == 200
    token = SessionToken(resp.cookies[settings.SESSION_TOKEN_COOKIE].value)
    assert token['city'] == 'Lahore'
    assert token['image']
    assert token['expiresAt'] == c.session_token['expiresAt']
    assert default_storage.exists(f"{settings.USER_DIR}/{token['image']}")


def test_profile_email_change_starts_new_session(session_client, make_user):
    pat = make_user('pat@example.com')
    c = session_client(pat)
    resp = c.put(reverse('profile'), {'name': 'Pat', 'email': 'new@example.com'}, format='json')
    token = SessionToken(resp.cookies[settings.SESSION_TOKEN_COOKIE].value)
    assert token['email'] == 'new@example.com'
    assert User.objects.get(pk=pat.pk).email == 'new@example.com'


def test_profile_rejects_bad_upload(session_client, make_user):
    c = session_client(make_user('pat@example.com'))
    bad = SimpleUploadedFile('x.exe', b'MZ', content_type='application/x-msdownload')
    resp = c.put(reverse('profile'), {'name': 'Pat', 'email': 'pat@example.com', 'image': bad},
                 format='multipart')
    assert resp.json()['message'] == messages.FILE.INVALID_FORMAT


def test_bio_round_trip(session_client, make_user):
    c = session_client(make_user('pat@example.com'))
    assert c.put(reverse('profile_bio'), {'bio': '# About me'}, format='json').status_code == 200
    assert c.get(reverse('profile')).json()['user']['bio'] == '# About me'


def test_admin_adds_doctor_and_doctor_edits_own_profile(admin_client, session_client):
    cardio = Speciality.objects.create(name='Cardiology')
    resp = admin_client.post(reverse('doctors'), {
        'name': 'Dr. Who', 'email': 'doc@example.com', 'password': 'longenough',
        'experience': 10, 'days_of_visit': ['monday'], 'specialities': [cardio.pk],
        'timings': [{'time': '10:00', 'duration': 30}, {'time': '10:00', 'duration': 45}],
    }, format='json')

    assert resp.status_code == 201
    assert resp.json()['message'] == messages.USER.DOCTOR_ADDED
    assert mail.outbox[0].to == ['doc@example.com']
    doctor = User.objects.get(email='doc@example.com')
    assert doctor.timings.count() == 1

    detail = admin_client.get(reverse('doctor_detail', args=[doctor.pk])).json()['doctor']
    assert detail['specialities'] == [{'id': cardio.pk, 'name': 'Cardiology'}]
    assert detail['roles'] == [settings.DOCTOR_ROLE]

    resp = session_client(doctor).put(reverse('doctor_detail', args=[doctor.pk]), {
        'name': 'Dr. Who', 'email': 'doc@example.com', 'experience': 11,
        'timings': [{'time': '09:30', 'duration': 20}],
    }, format='json')
    assert resp.status_code == 200
    doctor.refresh_from_db()
    assert doctor.experience == 11
    assert [t.time.strftime('%H:%M') for t in doctor.timings.all()] == ['09:30']


def test_doctor_profile_empty_specialities_clears_them(session_client, make_user):
    cardio = Speciality.objects.create(name='Cardiology')
    doctor = make_user('doc@example.com', roles=[settings.DOCTOR_ROLE], name='Dr. Who')
    doctor.specialities.add(cardio)
    url = reverse('doctor_detail', args=[doctor.pk])
    c = session_client(doctor)

    c.put(url, {'name': 'Dr. Who', 'email': 'doc@example.com'}, format='json')
    assert list(doctor.specialities.all()) == [cardio]

    resp = c.put(url, {'name': 'Dr. Who', 'email': 'doc@example.com', 'specialities': []}, format='json')

    assert resp.status_code == 200
    assert not doctor.specialities.exists()


def test_doctor_cannot_edit_another_doctor(session_client, make_user):
    one = make_user('one@example.com', roles=[settings.DOCTOR_ROLE])
    two = make_user('two@example.com', roles=[settings.DOCTOR_ROLE])
    resp = session_client(one).put(reverse('doctor_detail', args=[two.pk]),
                                   {'name': 'X', 'email': 'two@example.com'}, format='json')
    assert resp.status_code == 403


def test_doctors_filtered_by_speciality(session_client, make_user):
    cardio = Speciality.objects.create(name='Cardiology')
    one = make_user('one@example.com', roles=[settings.DOCTOR_ROLE], name='One')
    make_user('two@example.com', roles=[settings.DOCTOR_ROLE], name='Two')
    one.specialities.add(cardio)

    resp = session_client(one).get(reverse('doctors'), {'speciality': cardio.pk})

    assert [d['email'] for d in resp.json()['data']] == ['one@example.com']
