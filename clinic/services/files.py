"""
Local file storage for profile images, covers, bios and reports.

Files live under ``MEDIA_ROOT/<USER_DIR>/`` with generated names; the
stored name is what models keep and what clients send back.
"""
from __future__ import annotations

import logging
import mimetypes
import os
import uuid

from django.conf import settings
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from clinic import messages
from clinic.exceptions import ActionError

logger = logging.getLogger(__name__)


class UploadRejected(ActionError):
    """Raised for files that fail size or type validation."""


def _path(name: str) -> str:
    return f"{settings.USER_DIR}/{name}"


def is_safe_name(name: str) -> bool:
    return bool(name) and os.path.basename(name) == name and not name.startswith('.')


def validate_upload(upload) -> None:
    if upload.size > settings.UPLOAD_MAX_MB * 1024 * 1024:
        raise UploadRejected(messages.FILE.TOO_LARGE)
    content_type = getattr(upload, 'content_type', None) or mimetypes.guess_type(upload.name)[0] or ''
    if not any(content_type.startswith(t) for t in settings.ALLOWED_UPLOAD_TYPES):
        raise UploadRejected(messages.FILE.INVALID_FORMAT)


def save_file(upload) -> str:
    """Validate and store an uploaded file, returning its stored name."""
    validate_upload(upload)
    ext = os.path.splitext(upload.name)[1].lower()
    name = f"{uuid.uuid4()}{ext}"
    default_storage.save(_path(name), upload)
    logger.info("file stored %s (%s bytes)", name, upload.size)
    return name


def save_text(text: str, ext: str = '.md') -> str:
    name = f"{uuid.uuid4()}{ext}"
    default_storage.save(_path(name), ContentFile(text.encode('utf-8')))
    return name


def read_text(name: str | None) -> str:
    if not name or not is_safe_name(name) or not default_storage.exists(_path(name)):
        return ''
    with default_storage.open(_path(name), 'rb') as fh:
        return fh.read().decode('utf-8')


def open_file(name: str):
    """Return ``(file, content_type)``; raises ``FileNotFoundError``."""
    if not is_safe_name(name) or not default_storage.exists(_path(name)):
        raise FileNotFoundError(name)
    content_type = mimetypes.guess_type(name)[0] or 'application/octet-stream'
    return default_storage.open(_path(name), 'rb'), content_type


def remove_file(name: str | None) -> bool:
    """Delete a stored file; missing names are not an error."""
    if not name or not is_safe_name(name):
        return False
    path = _path(name)
    if not default_storage.exists(path):
        return False
    default_storage.delete(path)
    logger.info("file removed %s", name)
    return True
