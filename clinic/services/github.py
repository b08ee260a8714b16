import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import requests
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import transaction
from django.utils import timezone

from clinic.models import OAuthAccount, Role, UserRole

logger = logging.getLogger(__name__)

User = get_user_model()

PROVIDER = 'github'
AUTHORIZE_URL = 'https://github.com/login/oauth/authorize'
TOKEN_URL = 'https://github.com/login/oauth/access_token'
API_URL = 'https://api.github.com'


class GitHubError(RuntimeError):
    pass


@dataclass
class GitHubProfile:
    account_id: str
    email: str
    name: str
    avatar: Optional[str] = None
    access_token: str = ''


def authorize_url(state: str) -> str:
    if not settings.GITHUB_CLIENT_ID:
        raise GitHubError('GitHub sign-in not configured on server')
    params = {
        'client_id': settings.GITHUB_CLIENT_ID,
        'redirect_uri': f"{settings.HOST}/api/auth/github/callback",
        'scope': 'read:user user:email',
        'state': state,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def exchange_code(code: str) -> GitHubProfile:
    r = requests.post(TOKEN_URL, data={
        'client_id': settings.GITHUB_CLIENT_ID,
        'client_secret': settings.GITHUB_CLIENT_SECRET,
        'code': code,
    }, headers={'Accept': 'application/json'}, timeout=settings.GITHUB_TIMEOUT)
    r.raise_for_status()
    data = r.json()
    if 'error' in data:
        raise GitHubError(f"GitHub error {data.get('error')}: {data.get('error_description')}")
    access_token = data.get('access_token')
    if not access_token:
        raise GitHubError('Invalid response from GitHub: missing access_token')

    headers = {'Authorization': f'Bearer {access_token}', 'Accept': 'application/vnd.github+json'}
    r = requests.get(f'{API_URL}/user', headers=headers, timeout=settings.GITHUB_TIMEOUT)
    r.raise_for_status()
    profile = r.json()
    email = profile.get('email')
    if not email:
        r = requests.get(f'{API_URL}/user/emails', headers=headers, timeout=settings.GITHUB_TIMEOUT)
        r.raise_for_status()
        primary = [e for e in r.json() if e.get('primary') and e.get('verified')]
        email = primary[0]['email'] if primary else None
    if not email:
        raise GitHubError('GitHub account has no verified email')
    return GitHubProfile(
        account_id=str(profile['id']),
        email=email,
        name=profile.get('name') or profile.get('login') or '',
        avatar=profile.get('avatar_url'),
        access_token=access_token,
    )


def link_or_create_user(profile: GitHubProfile):
    """Return ``(user, is_new)`` for a GitHub profile.

    A first link marks the user as OAuth backed and verified, and gives
    the default role to users that have no role yet.
    """
    account = OAuthAccount.objects.select_related('user').filter(
        provider=PROVIDER, provider_account_id=profile.account_id).first()
    if account is not None:
        account.access_token = profile.access_token
        account.save(update_fields=['access_token'])
        return account.user, False

    with transaction.atomic():
        user = User.objects.filter(email__iexact=profile.email).first()
        is_new = user is None
        if is_new:
            user = User.objects.create_user(email=profile.email, name=profile.name, image=profile.avatar)
        OAuthAccount.objects.create(user=user, provider=PROVIDER,
                                    provider_account_id=profile.account_id,
                                    access_token=profile.access_token)
        # account linked: flag it without touching the in-memory instance
        User.objects.filter(pk=user.pk).update(has_oauth=True, email_verified=timezone.now())
        if not UserRole.objects.filter(user=user).exists():
            role, _ = Role.objects.get_or_create(name=settings.DEFAULT_ROLE)
            UserRole.objects.create(user=user, role=role)
    logger.info("github account linked user=%s new=%s", user.pk, is_new)
    return user, is_new
