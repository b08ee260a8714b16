import time

import pytest
from django.conf import settings

from clinic import constants
from clinic.middleware import is_unguarded, normalize_path

pytestmark = pytest.mark.django_db


@pytest.fixture
def clerk(make_user):
    return make_user('clerk@example.com', roles=['clerk'], permissions=['view:dashboard', 'view:roles'])


@pytest.mark.parametrize('raw, expected', [
    ('/Roles/Assign/', '/roles/assign'),
    ('/', '/'),
    ('', '/'),
    ('//', '/'),
    ('/dashboard', '/dashboard'),
])
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


@pytest.mark.parametrize('path', ['/api/roles', '/static/app.css', '/media/users/a.pdf',
                                  '/favicon.ico', '/logo.png', '/metrics', '/healthz'])
def test_unguarded_paths(path):
    assert is_unguarded(path)


def test_required_permission_prefers_most_specific_entry():
    assert constants.required_permission('/roles/assign') == 'assign:roles'
    assert constants.required_permission('/roles') == 'view:roles'
    assert constants.required_permission('/roles/17') == 'view:roles'
    assert constants.required_permission('/rolesx') is None
    assert constants.required_permission('/account') is None


def test_anonymous_on_private_page_goes_to_login(client):
    resp = client.get('/users')
    assert resp.status_code == 302
    assert resp['Location'] == constants.LOGIN


def test_anonymous_on_public_page_passes(client):
    resp = client.get('/login')
    assert resp.status_code == 200
    assert resp.json()['page'] == '/login'


def test_session_on_public_page_goes_to_dashboard(session_client, clerk):
    resp = session_client(clerk).get('/login')
    assert resp.status_code == 302
    assert resp['Location'] == constants.DASHBOARD


def test_missing_permission_redirects_to_dashboard(session_client, clerk):
    c = session_client(clerk)
    resp = c.get('/roles/assign')
    assert resp.status_code == 302
    assert resp['Location'] == constants.DASHBOARD


def test_granted_permission_reaches_page(session_client, clerk):
    resp = session_client(clerk).get('/Roles/')
    assert resp.status_code == 200
    body = resp.json()
    assert body['page'] == '/roles'
    assert body['permission'] == 'view:roles'
    assert body['session']['email'] == 'clerk@example.com'


def test_dashboard_never_loops(session_client, make_user):
    bare = make_user('bare@example.com')
    resp = session_client(bare).get('/dashboard')
    assert resp.status_code == 200


def test_expired_session_clears_cookie_and_goes_to_login(session_client, clerk):
    c = session_client(clerk, expiresAt=int(time.time()) - 1)

    resp = c.get('/roles')

    assert resp.status_code == 302
    assert resp['Location'] == constants.LOGIN
    cookie = resp.cookies[settings.SESSION_TOKEN_COOKIE]
    assert cookie.value == ''
    assert cookie['max-age'] == 0


def test_expired_session_checked_before_public_redirect(session_client, clerk):
    c = session_client(clerk, expiresAt=int(time.time()) - 1)
    resp = c.get('/login')
    assert resp['Location'] == constants.LOGIN


def test_unreadable_cookie_counts_as_no_session(client):
    client.cookies[settings.SESSION_TOKEN_COOKIE] = 'garbage'
    assert client.get('/roles')['Location'] == constants.LOGIN
    assert client.get('/signup').status_code == 200


@pytest.mark.parametrize('path', ['/roles', '/login'])
def test_unreadable_cookie_is_cleared(client, path):
    client.cookies[settings.SESSION_TOKEN_COOKIE] = 'garbage'

    resp = client.get(path)

    cookie = resp.cookies[settings.SESSION_TOKEN_COOKIE]
    assert cookie.value == ''
    assert cookie['max-age'] == 0


def test_api_paths_are_not_redirected(client):
    resp = client.get('/api/roles')
    assert resp.status_code == 401


def test_unknown_page_is_not_found(session_client, clerk):
    resp = session_client(clerk).get('/nowhere')
    assert resp.status_code == 404
    assert resp.json()['page'] == '/not-found'
