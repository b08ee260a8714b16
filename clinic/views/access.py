"""
Role and permission administration.

Reassignments replace the whole association set in one transaction and
then refresh the caller's own session when it is affected; sessions of
other users keep their cached claims until their next sign-in.
"""
from __future__ import annotations

import logging

from django.db import transaction
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import Permission, Role, User
from clinic.permissions import IsAdminRole
from clinic.serializers.access import AssignPermissionsSerializer, AssignRolesSerializer, NameSerializer
from clinic.services.access import replace_role_permissions, replace_user_roles
from clinic.services.claims import push_session_update

logger = logging.getLogger(__name__)


def _names(model) -> list[dict]:
    return list(model.objects.order_by('name').values('id', 'name'))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def roles(request):
    """``GET`` lists roles with their permissions; ``POST`` adds a role."""
    if request.method == 'GET':
        data = []
        for role in Role.objects.order_by('name').prefetch_related('role_permissions__permission'):
            data.append({
                'id': role.id,
                'name': role.name,
                'permissions': [{'id': rp.permission_id, 'name': rp.permission.name}
                                for rp in role.role_permissions.all()],
            })
        return success(roles=data)

    s = NameSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        with transaction.atomic():
            role = Role.objects.create(name=s.validated_data['name'])
    except Exception as exc:
        return action_failure(exc)
    return success(messages.ROLE.ADDED, code=201, role={'id': role.id, 'name': role.name})


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def permissions(request):
    """``GET`` lists permissions; ``POST`` adds one."""
    if request.method == 'GET':
        return success(permissions=_names(Permission))

    s = NameSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        with transaction.atomic():
            permission = Permission.objects.create(name=s.validated_data['name'])
    except Exception as exc:
        return action_failure(exc)
    return success(messages.PERMISSION.ADDED, code=201,
                   permission={'id': permission.id, 'name': permission.name})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def assign_roles(request):
    """Set a user's roles to exactly the submitted list."""
    s = AssignRolesSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    user_id = s.validated_data['user']
    role_ids = s.validated_data['roles']

    if not User.objects.filter(pk=user_id).exists():
        return failure(messages.USER.NOT_FOUND, 404)
    if Role.objects.filter(pk__in=role_ids).count() != len(set(role_ids)):
        return failure(messages.ROLE.NOT_FOUND, 404)
    try:
        replace_user_roles(user_id, role_ids)
    except Exception as exc:
        return action_failure(exc)

    response = success(messages.ROLE.ASSIGNED)
    if request.auth.user_id == user_id:
        push_session_update(request, response, session=request.auth)
    return response


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def assign_permissions(request):
    """Set a role's permissions to exactly the submitted list."""
    s = AssignPermissionsSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    permission_ids = s.validated_data['permissions']

    role = Role.objects.filter(name=s.validated_data['role']).first()
    if role is None:
        return failure(messages.ROLE.NOT_FOUND, 404)
    if Permission.objects.filter(pk__in=permission_ids).count() != len(set(permission_ids)):
        return invalid_inputs()
    try:
        replace_role_permissions(role.id, permission_ids)
    except Exception as exc:
        return action_failure(exc)

    response = success(messages.PERMISSION.ASSIGNED)
    if role.id in request.auth.role_ids:
        push_session_update(request, response, session=request.auth)
    return response
