"""
Route guard applied to every page request.

Evaluation order for a request (first match wins):

1. a session whose ``expiresAt`` has passed: clear the cookie, go to login;
2. a session lacking the permission that ``ROUTE_PERMISSIONS`` maps the
   path to: go to the dashboard (a soft redirect, never a 403);
3. no session on a non-public path: go to login;
4. a session on a public path: go to the dashboard.

A cookie that no longer decodes counts as no session and is cleared.

API, static, media and tooling prefixes are never inspected; API views
authorize through DRF permission classes instead.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.http import HttpResponseRedirect

from clinic import constants
from clinic.services.claims import clear_session_cookie, read_session

logger = logging.getLogger(__name__)


def normalize_path(path: str) -> str:
    path = (path or '/').lower()
    if len(path) > 1:
        path = path.rstrip('/') or '/'
    return path


def is_unguarded(path: str) -> bool:
    if path.endswith(constants.UNGUARDED_SUFFIXES):
        return True
    return any(path == p.rstrip('/') or path.startswith(p) for p in constants.UNGUARDED_PREFIXES)


class RouteGuardMiddleware:
    """Redirect expired, unauthorized and unauthenticated page requests."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        path = normalize_path(request.path_info)
        if is_unguarded(path):
            return self.get_response(request)

        session = read_session(request)
        request.session_token = session
        unreadable = session is None and bool(request.COOKIES.get(settings.SESSION_TOKEN_COOKIE))

        if session is not None and session.is_expired():
            logger.debug("route guard: expired session user=%s path=%s", session.user_id, path)
            response = HttpResponseRedirect(constants.LOGIN)
            clear_session_cookie(response)
            return response

        is_public = path in constants.PUBLIC_ROUTES

        if session is not None and path != constants.DASHBOARD:
            required = constants.required_permission(path)
            if required and required not in session.permission_names:
                logger.debug("route guard: user=%s lacks %s for %s", session.user_id, required, path)
                return HttpResponseRedirect(constants.DASHBOARD)

        if session is None and not is_public:
            response = HttpResponseRedirect(constants.LOGIN)
            if unreadable:
                clear_session_cookie(response)
            return response

        if session is not None and is_public:
            return HttpResponseRedirect(constants.DASHBOARD)

        response = self.get_response(request)
        if unreadable:
            clear_session_cookie(response)
        return response
