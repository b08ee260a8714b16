import pytest
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from clinic.models import Permission, Role, RolePermission, User, UserRole
from clinic.services.claims import issue_session_token


@pytest.fixture(autouse=True)
def _isolated(settings, tmp_path):
    # uploads go to a throwaway MEDIA_ROOT; throttle counters start empty
    settings.MEDIA_ROOT = tmp_path / 'media'
    settings.EMAIL_BACKEND = 'django.core.mail.backends.locmem.EmailBackend'
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_role(db):
    def _make(name, permissions=()):
        role, _ = Role.objects.get_or_create(name=name)
        for perm_name in permissions:
            perm, _ = Permission.objects.get_or_create(name=perm_name)
            RolePermission.objects.get_or_create(role=role, permission=perm)
        return role
    return _make


@pytest.fixture
def make_user(db, make_role):
    def _make(email, password='P@ssw0rd1', roles=(), permissions=(), verified=True, **extra):
        user = User.objects.create_user(
            email=email, password=password,
            email_verified=timezone.now() if verified else None, **extra)
        for i, name in enumerate(roles):
            # permissions attach to the first role
            role = make_role(name, permissions if i == 0 else ())
            UserRole.objects.create(user=user, role=role)
        return user
    return _make


@pytest.fixture
def session_client():
    """APIClient signed in as ``user`` through the session cookie."""
    def _client(user, **claims):
        client = APIClient()
        token = issue_session_token(user)
        for key, value in claims.items():
            token[key] = value
        client.cookies[settings.SESSION_TOKEN_COOKIE] = str(token)
        client.session_token = token
        return client
    return _client


@pytest.fixture
def admin_user(make_user):
    return make_user('admin@example.com', roles=[settings.ADMIN_ROLE],
                     permissions=['view:dashboard', 'view:roles', 'add:role', 'assign:roles',
                                  'view:permissions', 'add:permission', 'assign:permissions',
                                  'view:users', 'view:doctors', 'add:doctor'],
                     name='Admin')


@pytest.fixture
def admin_client(session_client, admin_user):
    return session_client(admin_user)
