"""
DRF authentication backed by the session token.

The session JWT normally travels in the session cookie set at sign-in;
API clients may send it as ``Authorization: Bearer <token>`` instead.
Keeping this class apart from the views avoids circular imports when
Django REST framework loads authentication classes at start-up.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken

from clinic.services.claims import raw_session_token


class SessionTokenAuthentication(JWTAuthentication):
    """Authenticate with the session cookie or a Bearer header.

    ``request.auth`` is the validated :class:`~clinic.services.claims.SessionToken`.
    A session whose ``expiresAt`` has passed authenticates nobody.  An
    unreadable cookie is ignored so that public endpoints (login, signup)
    keep working for a browser holding a stale cookie; an unreadable
    header is still rejected with 401.
    """

    def authenticate(self, request):
        raw = raw_session_token(request)
        if raw is None:
            return None
        from_cookie = bool(request.COOKIES.get(settings.SESSION_TOKEN_COOKIE))
        try:
            validated = self.get_validated_token(raw)
        except InvalidToken:
            if from_cookie:
                return None
            raise
        if validated.is_expired():
            return None
        return self.get_user(validated), validated
