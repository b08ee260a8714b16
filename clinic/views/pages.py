"""
Page routes.

These are the paths the route guard protects (``/dashboard``,
``/roles/assign``, ...).  By the time a request reaches them the guard
has already redirected expired, unauthenticated and unauthorized
sessions, so a page only has to describe itself and the session it is
rendered for.
"""
from __future__ import annotations

from django.http import JsonResponse

from clinic import constants
from clinic.middleware import normalize_path
from clinic.views.dashboard import dashboard_data

SESSION_KEYS = ('id', 'name', 'email', 'roles', 'permissions', 'city', 'phone', 'image', 'cover', 'hasOAuth')

# pages with no permission gate that signed-in users may open
PRIVATE_PAGES = ('/account', '/about', '/dashboard')


def is_known_page(path: str) -> bool:
    if path in constants.PUBLIC_ROUTES or path in PRIVATE_PAGES:
        return True
    return constants.required_permission(path) is not None


def page_view(request, page: str = ''):
    path = normalize_path(request.path_info)
    if not is_known_page(path):
        return JsonResponse({'success': False, 'page': '/not-found'}, status=404)

    payload: dict[str, object] = {'success': True, 'page': path}
    session = getattr(request, 'session_token', None)
    if session is not None:
        payload['session'] = {k: session.get(k) for k in SESSION_KEYS}
        payload['permission'] = constants.required_permission(path)
        if path == constants.DASHBOARD:
            payload.update(dashboard_data(session.role_names, session.user_id))
    return JsonResponse(payload)
