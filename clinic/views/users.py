"""
User administration and self-service profile endpoints.

Admin endpoints (list, edit, delete, toggle verification) require the
admin role.  ``/api/profile`` works on the caller's own account and
refreshes the caller's session so the new image/cover show up at once.
"""
from __future__ import annotations

from django.db.models import Prefetch
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import User, UserRole
from clinic.permissions import IsAdminRole
from clinic.serializers.auth import EmailSerializer
from clinic.serializers.users import BioSerializer, IdsSerializer, ProfileSerializer, UserUpdateSerializer
from clinic.services import users as user_service
from clinic.services.claims import push_session_update, sign_in
from clinic.services.files import read_text
from clinic.views.listing import BadListParams, paginate, search


def _with_roles(qs):
    return qs.prefetch_related(Prefetch('user_roles', queryset=UserRole.objects.select_related('role')))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminRole])
def list_users(request):
    """List users with their roles.

    Query params:
      - q: search in name/email/city
      - page, pageSize: pagination (optional)
    """
    qs = search(_with_roles(User.objects.order_by('-created_at')), request, ['name', 'email', 'city'])
    try:
        items, pagination = paginate(qs, request)
    except BadListParams:
        return invalid_inputs()
    return success(data=[user_service.user_payload(u) for u in items], pagination=pagination)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, user_id: int):
    user = _with_roles(User.objects.filter(pk=user_id)).first()
    if user is None:
        return failure(messages.USER.NOT_FOUND, 404)

    if request.method == 'GET':
        return success(user=user_service.user_payload(user))

    if request.method == 'DELETE':
        user_service.delete_users([user.pk])
        return success(messages.USER.DELETED)

    s = UserUpdateSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        user_service.update_user(user, s.validated_data)
    except Exception as exc:
        return action_failure(exc)
    return success(messages.USER.PROFILE_UPDATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def delete_users(request):
    s = IdsSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    user_service.delete_users(s.validated_data['ids'])
    return success(messages.USER.BULK_DELETED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def toggle_verified(request):
    """Flip a user's email verification and drop their pending token."""
    s = EmailSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        user = user_service.toggle_email_verified(s.validated_data['email'])
    except Exception as exc:
        return action_failure(exc)
    return success(messages.DATABASE.UPDATED, emailVerified=bool(user.email_verified))


@api_view(['GET', 'PUT'])
@permission_classes([IsAuthenticated])
def profile(request):
    user = request.user
    if request.method == 'GET':
        return success(user={**user_service.user_payload(user),
                             'bio': read_text(user.bio)})

    s = ProfileSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        user, email_changed = user_service.update_profile(
            user, s.validated_data,
            image=request.FILES.get('image'), cover=request.FILES.get('cover'),
        )
    except Exception as exc:
        return action_failure(exc)

    response = success(messages.USER.PROFILE_UPDATED)
    if email_changed:
        sign_in(response, user, provider=request.auth.get('provider') or 'credentials')
    else:
        push_session_update(request, response, session=request.auth)
    return response


@api_view(['PUT'])
@permission_classes([IsAuthenticated])
def bio(request):
    s = BioSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        user_service.update_bio(request.user, s.validated_data['bio'])
    except Exception as exc:
        return action_failure(exc)
    return success(messages.USER.PROFILE_UPDATED)
