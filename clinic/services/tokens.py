"""
Single-use verification tokens for email confirmation and password reset.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from clinic import messages
from clinic.models import Token

logger = logging.getLogger(__name__)


def generate_token(user_id) -> Token:
    """Replace any live token of ``user_id`` with a fresh one."""
    with transaction.atomic():
        Token.objects.filter(user_id=user_id).delete()
        token = Token.objects.create(
            user_id=user_id,
            expires=timezone.now() + timedelta(seconds=settings.TOKEN_EXPIRES_AT),
        )
    logger.info("verification token issued user=%s", user_id)
    return token


@dataclass
class TokenCheck:
    token: Optional[Token] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def check_token(value) -> TokenCheck:
    """Look up a token by its emailed value without consuming it."""
    try:
        token_id = uuid.UUID(str(value))
    except (TypeError, ValueError):
        return TokenCheck(error=messages.AUTH.TOKEN_NOT_FOUND)
    token = Token.objects.select_related('user').filter(pk=token_id).first()
    if token is None:
        return TokenCheck(error=messages.AUTH.TOKEN_NOT_FOUND)
    if token.expires <= timezone.now():
        return TokenCheck(token=token, error=messages.AUTH.TOKEN_EXPIRED)
    return TokenCheck(token=token)


def verify_token(value) -> TokenCheck:
    """Confirm the owner's email and consume the token."""
    result = check_token(value)
    if not result.ok:
        return result
    token = result.token
    with transaction.atomic():
        user = token.user
        user.email_verified = timezone.now()
        user.save(update_fields=['email_verified', 'updated_at'])
        token.delete()
    logger.info("email verified user=%s", user.pk)
    return result


def verification_link(token: Token) -> str:
    return f"{settings.HOST}/verify?token={token.pk}"


def reset_link(token: Token) -> str:
    return f"{settings.HOST}/create-password?token={token.pk}"
