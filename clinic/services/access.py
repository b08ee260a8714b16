"""
Full-replace assignment of roles to users and permissions to roles.

Both operations delete every existing join row for the owner and
recreate exactly the submitted set inside one transaction, so readers
never see the empty intermediate state.
"""
from __future__ import annotations

import logging
from typing import Iterable

from django.db import transaction

from clinic.models import RolePermission, UserRole

logger = logging.getLogger(__name__)


def _unique(ids: Iterable) -> list:
    seen: list = []
    for value in ids:
        value = int(value)
        if value not in seen:
            seen.append(value)
    return seen


def replace_user_roles(user_id, role_ids: Iterable) -> list[int]:
    """Set ``user_id``'s roles to exactly ``role_ids``."""
    role_ids = _unique(role_ids)
    with transaction.atomic():
        UserRole.objects.filter(user_id=user_id).delete()
        UserRole.objects.bulk_create([UserRole(user_id=user_id, role_id=rid) for rid in role_ids])
    logger.info("roles replaced user=%s roles=%s", user_id, role_ids)
    return role_ids


def replace_role_permissions(role_id, permission_ids: Iterable) -> list[int]:
    """Set ``role_id``'s permissions to exactly ``permission_ids``."""
    permission_ids = _unique(permission_ids)
    with transaction.atomic():
        RolePermission.objects.filter(role_id=role_id).delete()
        RolePermission.objects.bulk_create(
            [RolePermission(role_id=role_id, permission_id=pid) for pid in permission_ids]
        )
    logger.info("permissions replaced role=%s permissions=%s", role_id, permission_ids)
    return permission_ids


def user_role_ids(user_id) -> set[int]:
    return set(UserRole.objects.filter(user_id=user_id).values_list('role_id', flat=True))


def role_permission_ids(role_id) -> set[int]:
    return set(RolePermission.objects.filter(role_id=role_id).values_list('permission_id', flat=True))
