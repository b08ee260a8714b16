import smtplib

import pytest
from django.conf import settings
from django.core import mail
from django.urls import reverse
from django.utils import timezone

from clinic import constants, messages
from clinic.auth_views import OAUTH_STATE_COOKIE
from clinic.models import OAuthAccount, Token, User
from clinic.services import github
from clinic.services.claims import SessionToken

pytestmark = pytest.mark.django_db


def _post(client, name, data):
    return client.post(reverse(name), data, content_type='application/json')


def test_signup_sends_verification_instead_of_session(client):
    resp = _post(client, 'signup', {'name': 'Pat', 'email': 'Pat@Example.com', 'password': 'longenough'})

    assert resp.status_code == 200
    assert resp.json() == {'success': True, 'message': messages.USER.CONFIRM_EMAIL, 'email': 'pat@example.com'}
    assert settings.SESSION_TOKEN_COOKIE not in resp.cookies
    user = User.objects.get(email='pat@example.com')
    assert [r.role.name for r in user.user_roles.all()] == [settings.DEFAULT_ROLE]
    token = Token.objects.get(user=user)
    assert len(mail.outbox) == 1
    assert f'/verify?token={token.pk}' in mail.outbox[0].alternatives[0][0]


def test_signup_rejects_registered_email(client, make_user):
    make_user('pat@example.com')
    resp = _post(client, 'signup', {'name': 'Pat', 'email': 'pat@example.com', 'password': 'longenough'})
    assert resp.status_code == 400
    assert resp.json()['message'] == messages.USER.EMAIL_REGISTERED


def test_signup_short_password_is_invalid(client):
    resp = _post(client, 'signup', {'name': 'Pat', 'email': 'pat@example.com', 'password': 'short'})
    assert resp.json() == {'success': False, 'message': messages.SYSTEM.INVALID_INPUTS}


def test_login_sets_session_cookie(client, make_user):
    make_user('pat@example.com', password='longenough', roles=['clerk'], permissions=['view:dashboard'])

    resp = _post(client, 'login', {'email': 'pat@example.com', 'password': 'longenough'})

    assert resp.status_code == 200
    assert resp.json()['message'] == messages.AUTH.LOGGED_IN
    cookie = resp.cookies[settings.SESSION_TOKEN_COOKIE]
    assert cookie['httponly']
    assert cookie['samesite'] == 'Lax'
    assert SessionToken(cookie.value).permission_names == {'view:dashboard'}


@pytest.mark.parametrize('typed', ['Dr.Who@Example.com', 'dr.who@example.com', 'DR.WHO@EXAMPLE.COM'])
def test_login_ignores_email_case(admin_client, client, typed):
    resp = admin_client.post(reverse('doctors'), {
        'name': 'Dr Who', 'email': 'Dr.Who@Example.com', 'password': 'longenough',
        'timings': [{'time': '10:00', 'duration': 30}],
    }, format='json')
    assert resp.status_code == 201, resp.json()
    doctor = User.objects.get(email__iexact='dr.who@example.com')
    assert doctor.email == 'dr.who@example.com'
    User.objects.filter(pk=doctor.pk).update(email_verified=timezone.now())

    resp = _post(client, 'login', {'email': typed, 'password': 'longenough'})

    assert resp.json()['message'] == messages.AUTH.LOGGED_IN
    assert settings.SESSION_TOKEN_COOKIE in resp.cookies


def test_email_change_is_stored_lowercase(client, make_user):
    pat = make_user('pat@example.com', password='longenough')
    user = User.objects.get(pk=pat.pk)
    user.email = 'Pat.New@Example.com'
    user.save()

    resp = _post(client, 'login', {'email': 'Pat.New@Example.com', 'password': 'longenough'})

    assert User.objects.get(pk=pat.pk).email == 'pat.new@example.com'
    assert resp.json()['message'] == messages.AUTH.LOGGED_IN


@pytest.mark.parametrize('email, password', [
    ('pat@example.com', 'wrong-password'),
    ('nobody@example.com', 'longenough'),
])
def test_login_failures_share_one_message(client, make_user, email, password):
    make_user('pat@example.com', password='longenough')
    resp = _post(client, 'login', {'email': email, 'password': password})
    assert resp.status_code == 400
    assert resp.json()['message'] == messages.AUTH.INVALID_CREDENTIALS


def test_login_unverified_user_gets_new_link(client, make_user):
    user = make_user('pat@example.com', password='longenough', verified=False)

    resp = _post(client, 'login', {'email': 'pat@example.com', 'password': 'longenough'})

    assert resp.json()['message'] == messages.USER.CONFIRM_EMAIL
    assert settings.SESSION_TOKEN_COOKIE not in resp.cookies
    assert Token.objects.filter(user=user).count() == 1
    assert mail.outbox[0].to == ['pat@example.com']


def test_forget_and_create_password(client, make_user):
    user = make_user('pat@example.com', password='longenough', verified=False)

    resp = _post(client, 'forget', {'email': 'pat@example.com'})
    assert resp.json()['message'] == messages.USER.CONFIRM_EMAIL
    token = Token.objects.get(user=user)
    assert f'/create-password?token={token.pk}' in mail.outbox[0].alternatives[0][0]

    resp = _post(client, 'create_password', {'token': str(token.pk), 'password': 'brand-new-secret'})
    assert resp.status_code == 200
    assert resp.json()['message'] == messages.AUTH.PASSWORD_UPDATED
    assert settings.SESSION_TOKEN_COOKIE in resp.cookies

    user.refresh_from_db()
    assert user.check_password('brand-new-secret')
    assert user.email_verified is not None
    assert not Token.objects.filter(user=user).exists()


def test_forget_unknown_email(client):
    resp = _post(client, 'forget', {'email': 'nobody@example.com'})
    assert resp.json()['message'] == messages.USER.EMAIL_NOT_FOUND
    assert mail.outbox == []


def test_create_password_needs_a_live_token(client):
    resp = _post(client, 'create_password',
                 {'token': '00000000-0000-0000-0000-000000000000', 'password': 'brand-new-secret'})
    assert resp.status_code == 400
    assert resp.json()['message'] == messages.AUTH.TOKEN_NOT_FOUND


def test_logout_clears_cookie(session_client, make_user):
    c = session_client(make_user('pat@example.com'))
    resp = c.post(reverse('logout'))
    assert resp.json()['message'] == messages.AUTH.LOGGED_OUT
    assert resp.cookies[settings.SESSION_TOKEN_COOKIE].value == ''


def test_stale_cookie_does_not_block_login(client, make_user):
    make_user('pat@example.com', password='longenough')
    client.cookies[settings.SESSION_TOKEN_COOKIE] = 'garbage'
    resp = _post(client, 'login', {'email': 'pat@example.com', 'password': 'longenough'})
    assert resp.status_code == 200


def test_email_errors_map_to_messages(client, make_user, monkeypatch):
    def refuse(*args, **kwargs):
        raise smtplib.SMTPRecipientsRefused({'pat@example.com': (550, b'no such user')})

    monkeypatch.setattr('clinic.services.email.send_mail', refuse)
    make_user('pat@example.com', password='longenough', verified=False)

    resp = _post(client, 'login', {'email': 'pat@example.com', 'password': 'longenough'})

    assert resp.status_code == 400
    assert resp.json()['message'] == messages.USER.EMAIL_BOUNCED


# ---------------------------------------------------------------------
# GitHub
# ---------------------------------------------------------------------
@pytest.fixture
def github_profile(monkeypatch):
    profile = github.GitHubProfile(account_id='42', email='octo@example.com', name='Octo',
                                   avatar='https://avatars.example.com/42', access_token='gho_x')
    monkeypatch.setattr(github, 'exchange_code', lambda code: profile)
    return profile


def test_github_authorize_redirects_with_state(client, settings):
    settings.GITHUB_CLIENT_ID = 'client-id'
    resp = client.get(reverse('github_authorize'))
    assert resp.status_code == 302
    assert resp['Location'].startswith(github.AUTHORIZE_URL)
    state = resp.cookies[OAUTH_STATE_COOKIE].value
    assert f'state={state}' in resp['Location']


def test_github_authorize_unconfigured(client, settings):
    settings.GITHUB_CLIENT_ID = ''
    resp = client.get(reverse('github_authorize'))
    assert resp['Location'] == constants.AUTH_ERROR


def test_github_callback_creates_verified_oauth_user(client, github_profile):
    client.cookies[OAUTH_STATE_COOKIE] = 'abc'

    resp = client.get(reverse('github_callback'), {'code': 'xyz', 'state': 'abc'})

    assert resp.status_code == 302
    assert resp['Location'] == constants.DASHBOARD
    user = User.objects.get(email='octo@example.com')
    assert user.has_oauth
    assert user.email_verified is not None
    assert OAuthAccount.objects.filter(user=user, provider='github', provider_account_id='42').exists()
    token = SessionToken(resp.cookies[settings.SESSION_TOKEN_COOKIE].value)
    assert token['hasOAuth'] is True
    assert token['provider'] == 'github'
    assert token.role_names == {settings.DEFAULT_ROLE}


def test_github_callback_links_existing_user(client, github_profile, make_user):
    existing = make_user('octo@example.com', roles=['clerk'])
    client.cookies[OAUTH_STATE_COOKIE] = 'abc'

    client.get(reverse('github_callback'), {'code': 'xyz', 'state': 'abc'})

    assert User.objects.count() == 1
    existing.refresh_from_db()
    assert existing.has_oauth
    assert [r.role.name for r in existing.user_roles.all()] == ['clerk']


def test_github_callback_rejects_state_mismatch(client, github_profile):
    client.cookies[OAUTH_STATE_COOKIE] = 'abc'
    resp = client.get(reverse('github_callback'), {'code': 'xyz', 'state': 'other'})
    assert resp['Location'] == constants.AUTH_ERROR
    assert not User.objects.exists()


def test_github_callback_exchange_failure(client, monkeypatch):
    def boom(code):
        raise github.GitHubError('bad code')

    monkeypatch.setattr(github, 'exchange_code', boom)
    client.cookies[OAUTH_STATE_COOKIE] = 'abc'
    resp = client.get(reverse('github_callback'), {'code': 'xyz', 'state': 'abc'})
    assert resp['Location'] == constants.AUTH_ERROR
