"""
File upload endpoints backing profile images, covers and reports.

Anyone signed in may read a stored file by name; removing one is
limited to admins, the account that uploaded it and the account whose
profile points at it.
"""
from __future__ import annotations

from django.db.models import Q
from django.http import FileResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, success
from clinic.models import StoredFile, User
from clinic.permissions import is_admin
from clinic.services import files


def _may_remove(request, name: str) -> bool:
    if is_admin(request):
        return True
    if StoredFile.objects.filter(name=name, owner=request.user).exists():
        return True
    return User.objects.filter(Q(image=name) | Q(cover=name) | Q(bio=name), pk=request.user.pk).exists()


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def upload(request):
    """Store one multipart file (``file`` or ``image``) and return its name."""
    upload = request.FILES.get('file') or request.FILES.get('image')
    if upload is None:
        return failure(messages.FILE.NOT_FOUND)
    try:
        name = files.save_file(upload)
        StoredFile.objects.create(name=name, owner=request.user)
    except Exception as exc:
        return action_failure(exc)
    return success(messages.FILE.UPLOADED, code=201, file=name)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated])
def uploaded_file(request, name: str):
    if request.method == 'GET':
        try:
            fh, content_type = files.open_file(name)
        except FileNotFoundError:
            return failure(messages.FILE.NOT_FOUND, 404)
        return FileResponse(fh, content_type=content_type)

    if not _may_remove(request, name):
        return failure(messages.AUTH.UNAUTHORIZED, 403)
    try:
        removed = files.remove_file(name)
    except Exception as exc:
        return action_failure(exc)
    StoredFile.objects.filter(name=name).delete()
    if not removed:
        return failure(messages.FILE.NOT_FOUND, 404)
    return success(messages.FILE.REMOVED)
