"""
Session claims: building, issuing, reading and pushing session tokens.

A session is a signed JWT (see :class:`SessionToken`) that caches the
user's roles and the permissions implied by them.  The cache is only
refreshed at sign-in or by an explicit :func:`push_session_update`, so
an admin changing someone else's roles leaves that other session stale
until its next sign-in.

``expiresAt`` is the server-issued end of the session (epoch seconds).
It is deliberately shorter than the JWT lifetime so that an outdated
session still decodes and the route guard can clear it instead of
treating the browser as anonymous.
"""
from __future__ import annotations

import logging
import time

from django.conf import settings
from django.contrib.auth import get_user_model
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from clinic.models import Permission, Role

logger = logging.getLogger(__name__)

CREDENTIALS = 'credentials'


class SessionToken(AccessToken):
    """Access token carrying the session claims."""

    @property
    def user_id(self):
        return self.get(api_settings.USER_ID_CLAIM)

    @property
    def role_ids(self) -> set[int]:
        return {r['id'] for r in self.get('roles') or []}

    @property
    def role_names(self) -> set[str]:
        return {r['name'] for r in self.get('roles') or []}

    @property
    def permission_names(self) -> set[str]:
        return {p['name'] for p in self.get('permissions') or []}

    def is_expired(self, now: float | None = None) -> bool:
        expires_at = self.get('expiresAt')
        if expires_at is None:
            return True
        return expires_at - (now if now is not None else time.time()) <= 0


def load_roles(user_id) -> list[dict]:
    return list(
        Role.objects.filter(user_roles__user_id=user_id).order_by('id').values('id', 'name')
    )


def load_permissions(role_ids) -> list[dict]:
    return list(
        Permission.objects.filter(role_permissions__role_id__in=list(role_ids))
        .distinct().order_by('id').values('id', 'name')
    )


def build_claims(user, *, provider: str = CREDENTIALS, expires_at: int | None = None) -> dict:
    """Collect the claims embedded in a session for ``user``.

    For external identity providers ``hasOAuth`` is read back from the
    database; the in-memory user handed over by the sign-in flow may
    predate the account link.
    """
    roles = load_roles(user.pk)
    permissions = load_permissions(r['id'] for r in roles)

    has_oauth = user.has_oauth
    if provider != CREDENTIALS:
        has_oauth = bool(
            get_user_model().objects.filter(pk=user.pk).values_list('has_oauth', flat=True).first()
        )

    if expires_at is None:
        expires_at = int(time.time()) + settings.SESSION_EXPIRES_AT

    return {
        'id': user.pk,
        'name': user.name,
        'email': user.email,
        'roles': roles,
        'permissions': permissions,
        'city': user.city,
        'phone': user.phone,
        'image': user.image,
        'cover': user.cover,
        'hasOAuth': has_oauth,
        'provider': provider,
        'expiresAt': expires_at,
    }


def issue_session_token(user, *, provider: str = CREDENTIALS, expires_at: int | None = None) -> SessionToken:
    token = SessionToken.for_user(user)
    for key, value in build_claims(user, provider=provider, expires_at=expires_at).items():
        token[key] = value
    return token


def raw_session_token(request) -> str | None:
    """Return the encoded session from the cookie or a Bearer header."""
    raw = request.COOKIES.get(settings.SESSION_TOKEN_COOKIE)
    if raw:
        return raw
    parts = request.META.get(api_settings.AUTH_HEADER_NAME, '').split()
    if len(parts) == 2 and parts[0] in api_settings.AUTH_HEADER_TYPES:
        return parts[1]
    return None


def read_session(request) -> SessionToken | None:
    raw = raw_session_token(request)
    if not raw:
        return None
    try:
        return SessionToken(raw)
    except TokenError:
        return None


def set_session_cookie(response, token: SessionToken) -> None:
    response.set_cookie(
        settings.SESSION_TOKEN_COOKIE,
        str(token),
        max_age=settings.SESSION_MAX_AGE,
        httponly=True,
        samesite='Lax',
        secure=settings.SESSION_TOKEN_COOKIE_SECURE,
    )


def clear_session_cookie(response) -> None:
    response.delete_cookie(settings.SESSION_TOKEN_COOKIE, samesite='Lax')


def sign_in(response, user, *, provider: str = CREDENTIALS) -> SessionToken:
    """Issue a fresh session for ``user`` and attach it to ``response``."""
    token = issue_session_token(user, provider=provider)
    set_session_cookie(response, token)
    logger.info("session issued user=%s provider=%s roles=%s",
                user.pk, provider, sorted(token.role_names))
    return token


def push_session_update(request, response, session: SessionToken | None = None) -> SessionToken | None:
    """Re-issue the caller's own session from the current database state.

    The original ``expiresAt`` is kept so a push never extends a session.
    Returns ``None`` (and pushes nothing) when the request carries no
    readable session or its user no longer exists.
    """
    session = session if session is not None else read_session(request)
    if session is None:
        return None
    user = get_user_model().objects.filter(pk=session.user_id).first()
    if user is None:
        return None
    token = issue_session_token(
        user,
        provider=session.get('provider') or CREDENTIALS,
        expires_at=session.get('expiresAt'),
    )
    set_session_cookie(response, token)
    logger.info("session pushed user=%s permissions=%s", user.pk, sorted(token.permission_names))
    return token
