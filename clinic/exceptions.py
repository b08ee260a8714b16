"""
Error mapping for action boundaries and the DRF exception handler.

Actions catch storage, mail and filesystem failures at their own
boundary and turn them into the uniform ``{success, message}`` shape
via :func:`catch_errors`.  Anything it does not recognise propagates to
:func:`api_exception_handler`, which DRF calls for uncaught API errors.
"""
from __future__ import annotations

import errno
import logging
import smtplib
import socket

from django.db import DatabaseError, IntegrityError
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

from clinic import messages

logger = logging.getLogger(__name__)


class ActionError(Exception):
    """A refused action; ``message`` is shown to the user as is."""

    def __init__(self, message: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def catch_errors(exc: BaseException) -> str:
    """Return the user facing message for a known failure, else re-raise."""
    if isinstance(exc, IntegrityError):
        logger.info("unique constraint violated: %s", exc)
        return messages.SYSTEM.UNIQUE_ERROR
    if isinstance(exc, DatabaseError):
        logger.error("database error: %s", exc)
        return messages.SYSTEM.DATABASE_UNAVAILABLE
    if isinstance(exc, smtplib.SMTPAuthenticationError):
        logger.error("smtp authentication failed: %s", exc)
        return messages.SMTP.AUTH_FAILED
    if isinstance(exc, smtplib.SMTPRecipientsRefused):
        return messages.USER.EMAIL_BOUNCED
    if isinstance(exc, (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, ConnectionRefusedError)):
        logger.error("smtp connect failed: %s", exc)
        return messages.SMTP.CONNECT_FAILED
    if isinstance(exc, (socket.timeout, TimeoutError)):
        logger.error("smtp timeout: %s", exc)
        return messages.SMTP.TIMEOUT
    if isinstance(exc, OSError):
        if exc.errno == errno.ENOSPC:
            return messages.FILE.SPACE_FULL
        if exc.errno == errno.EACCES:
            return messages.FILE.PERMISSION_DENIED
        if exc.errno == errno.ENOENT:
            return messages.FILE.DIRECTORY_NOT_FOUND
    raise exc


def failure(message: str, code: int = status.HTTP_400_BAD_REQUEST, **extra) -> Response:
    return Response({'success': False, 'message': message, **extra}, status=code)


def success(message: str | None = None, code: int = status.HTTP_200_OK, **extra) -> Response:
    payload: dict[str, object] = {'success': True}
    if message is not None:
        payload['message'] = message
    payload.update(extra)
    return Response(payload, status=code)


def invalid_inputs(errors=None) -> Response:
    """Validation failure; ``errors`` are serializer field errors."""
    if errors:
        return failure(messages.SYSTEM.INVALID_INPUTS, errors=errors)
    return failure(messages.SYSTEM.INVALID_INPUTS)


def api_exception_handler(exc, context):
    resp = drf_exception_handler(exc, context)
    if resp is None:
        logger.exception("unhandled api error", exc_info=exc)
        return Response({'success': False, 'message': messages.SYSTEM.SERVER_ERROR},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    # normalize response
    if isinstance(resp.data, dict):
        detail = resp.data.get('detail') or messages.SYSTEM.INVALID_INPUTS
    else:
        detail = str(resp.data)
    headers = {k: resp[k] for k in ('WWW-Authenticate', 'Retry-After') if resp.has_header(k)}
    return Response({'success': False, 'message': str(detail)}, status=resp.status_code, headers=headers)


def action_failure(exc: Exception) -> Response:
    """Response for an exception raised inside an action; unknown errors propagate."""
    if isinstance(exc, ActionError):
        return failure(exc.message, exc.status_code)
    return failure(catch_errors(exc))
