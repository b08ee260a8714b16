import pytest
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse

from clinic import messages
from clinic.models import StoredFile
from clinic.services.files import is_safe_name, read_text, save_file, save_text

pytestmark = pytest.mark.django_db


@pytest.fixture
def user_client(session_client, make_user):
    return session_client(make_user('pat@example.com'))


@pytest.mark.parametrize('name, safe', [
    ('3f2a.png', True),
    ('../settings.py', False),
    ('.env', False),
    ('a/b.png', False),
    ('', False),
])
def test_is_safe_name(name, safe):
    assert is_safe_name(name) is safe


def test_text_round_trip():
    name = save_text('hello')
    assert name.endswith('.md')
    assert read_text(name) == 'hello'
    assert read_text('missing.md') == ''


def test_upload_fetch_and_remove(user_client):
    resp = user_client.post(reverse('upload'),
                            {'file': SimpleUploadedFile('r.pdf', b'%PDF-1.4', 'application/pdf')},
                            format='multipart')
    assert resp.status_code == 201
    name = resp.json()['file']
    assert name.endswith('.pdf')

    fetched = user_client.get(reverse('uploaded_file', args=[name]))
    assert fetched.status_code == 200
    assert fetched['Content-Type'] == 'application/pdf'
    assert b''.join(fetched.streaming_content) == b'%PDF-1.4'

    assert user_client.delete(reverse('uploaded_file', args=[name])).json()['message'] == messages.FILE.REMOVED
    assert user_client.get(reverse('uploaded_file', args=[name])).status_code == 404


def test_upload_too_large(user_client, settings):
    settings.UPLOAD_MAX_MB = 0
    resp = user_client.post(reverse('upload'),
                            {'file': SimpleUploadedFile('a.png', b'x', 'image/png')}, format='multipart')
    assert resp.json()['message'] == messages.FILE.TOO_LARGE


def test_upload_without_file(user_client):
    resp = user_client.post(reverse('upload'), {}, format='multipart')
    assert resp.json()['message'] == messages.FILE.NOT_FOUND


def test_upload_requires_session(client):
    resp = client.post(reverse('upload'), {'file': SimpleUploadedFile('a.png', b'x', 'image/png')})
    assert resp.status_code == 401


def _stored_name(c):
    resp = c.post(reverse('upload'),
                  {'file': SimpleUploadedFile('r.pdf', b'%PDF-1.4', 'application/pdf')}, format='multipart')
    return resp.json()['file']


def test_only_uploader_or_admin_removes_a_file(user_client, session_client, make_user, admin_client):
    name = _stored_name(user_client)
    other = session_client(make_user('other@example.com'))
    url = reverse('uploaded_file', args=[name])

    resp = other.delete(url)
    assert resp.status_code == 403
    assert resp.json()['message'] == messages.AUTH.UNAUTHORIZED
    assert other.get(url).status_code == 200

    assert admin_client.delete(url).json()['message'] == messages.FILE.REMOVED
    assert not StoredFile.objects.filter(name=name).exists()


def test_user_removes_own_profile_image(session_client, make_user):
    png = SimpleUploadedFile('a.png', b'\x89PNG\r\n', 'image/png')
    user = make_user('pat@example.com', image=save_file(png))

    resp = session_client(user).delete(reverse('uploaded_file', args=[user.image]))

    assert resp.json()['message'] == messages.FILE.REMOVED
