"""
One-shot bootstrap of the admin role, default permission and admin user.

Not idempotent: a second run hits the unique constraints on role,
permission and email and fails instead of silently doing nothing.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic.models import Permission, Role, RolePermission, UserRole

logger = logging.getLogger(__name__)


def seed():
    """Create the baseline rows; raises ``IntegrityError`` on rerun."""
    User = get_user_model()
    with transaction.atomic():
        role = Role.objects.create(name=settings.ADMIN_ROLE)
        permission = Permission.objects.create(name=settings.DEFAULT_PERMISSION)
        user = User.objects.create_user(
            email=settings.ADMIN_EMAIL,
            password=settings.ADMIN_PASSWORD,
            name=settings.ADMIN_NAME,
            email_verified=timezone.now(),
        )
        UserRole.objects.create(user=user, role=role)
        RolePermission.objects.create(role=role, permission=permission)
    logger.info("database seeded admin=%s", user.email)
    return user
