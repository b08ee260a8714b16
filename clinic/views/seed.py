from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny

from clinic import messages
from clinic.exceptions import action_failure, success
from clinic.services.seed import seed


@api_view(['POST'])
@permission_classes([AllowAny])
def seed_view(request):
    """Bootstrap the admin role, default permission and admin user.

    Fails with the duplicate record message when run a second time.
    """
    try:
        seed()
    except Exception as exc:
        return action_failure(exc)
    return success(messages.DATABASE.UPDATED, code=201)
