"""
Dashboard data.

Admins get organisation wide cards and new users per month; everybody
else gets personal cards and their own appointments per month.
"""
from __future__ import annotations

from django.conf import settings
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic.exceptions import invalid_inputs, success
from clinic.services import dashboard


def dashboard_data(roles, user_id, year=None) -> dict:
    if settings.ADMIN_ROLE in roles:
        return {'cards': dashboard.admin_cards(), 'chart': dashboard.monthly_users(year)}
    return {'cards': dashboard.user_cards(user_id), 'chart': dashboard.monthly_appointments(user_id, year)}


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_view(request):
    year = request.query_params.get('year')
    if year is not None and not year.isdigit():
        return invalid_inputs()
    return success(**dashboard_data(request.auth.role_names, request.user.pk, int(year) if year else None))
