"""
Account entry points: sign-up, credential login, email verification,
password reset, GitHub sign-in and logout.  A successful sign-in sets
the session cookie built by :mod:`clinic.services.claims`; none of
these responses reveal whether it was the email or the password that
was wrong.
"""
from __future__ import annotations

import logging
import secrets

import requests
from django.conf import settings
from django.contrib.auth import authenticate
from django.db import transaction
from django.http import HttpResponseRedirect
from django.utils import timezone
from rest_framework.decorators import api_view, permission_classes, throttle_classes
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import SimpleRateThrottle

from clinic import constants, messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import User
from clinic.serializers.auth import (
    CreatePasswordSerializer,
    EmailSerializer,
    GitHubCallbackSerializer,
    LoginSerializer,
    SignupSerializer,
    TokenSerializer,
)
from clinic.services import github
from clinic.services.claims import clear_session_cookie, sign_in
from clinic.services.email import send_reset_password_email, send_verification_email
from clinic.services.tokens import check_token, generate_token, verify_token
from clinic.services.users import create_account, email_taken

logger = logging.getLogger(__name__)

OAUTH_STATE_COOKIE = 'healthify.oauth-state'


class LoginRateThrottle(SimpleRateThrottle):
    """Per client IP limit on credential endpoints, signed in or not."""
    scope = 'login'

    def get_cache_key(self, request, view):
        return self.cache_format % {'scope': self.scope, 'ident': self.get_ident(request)}


def session_payload(token) -> dict:
    return {k: token.get(k) for k in ('id', 'name', 'email', 'roles', 'permissions', 'city',
                                      'phone', 'image', 'cover', 'hasOAuth', 'expiresAt')}


def _complete_login(request, user):
    """Sign ``user`` in, or send a verification link when unverified."""
    if not user.email_verified:
        try:
            token = generate_token(user.pk)
            send_verification_email(user, token)
        except Exception as exc:
            return action_failure(exc)
        logger.info("login deferred, email unverified user=%s", user.pk)
        return success(messages.USER.CONFIRM_EMAIL, email=user.email)

    response = success(messages.AUTH.LOGGED_IN)
    token = sign_in(response, user)
    response.data['user'] = session_payload(token)
    return response


# ---------------------------------------------------------------------
# Email/password
# ---------------------------------------------------------------------
@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def login_view(request):
    s = LoginSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    vd = s.validated_data

    user = authenticate(request, username=vd['email'], password=vd['password'])
    if not user:
        logger.info("login refused email=%s ip=%s", vd['email'], request.META.get('REMOTE_ADDR'))
        return failure(messages.AUTH.INVALID_CREDENTIALS)
    return _complete_login(request, user)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def signup_view(request):
    s = SignupSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    vd = s.validated_data

    if email_taken(vd['email']):
        return failure(messages.USER.EMAIL_REGISTERED)
    try:
        user = create_account(name=vd['name'], email=vd['email'], password=vd['password'],
                              role_name=settings.DEFAULT_ROLE)
    except Exception as exc:
        return action_failure(exc)
    return _complete_login(request, user)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def verify_view(request):
    s = TokenSerializer(data=request.data if request.method == 'POST' else request.query_params)
    if not s.is_valid():
        return failure(messages.AUTH.TOKEN_NOT_FOUND)
    result = verify_token(s.validated_data['token'])
    if not result.ok:
        return failure(result.error)
    return success(messages.USER.EMAIL_VERIFIED, email=result.token.user.email)


@api_view(['POST'])
@permission_classes([AllowAny])
@throttle_classes([LoginRateThrottle])
def forget_password_view(request):
    s = EmailSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    email = s.validated_data['email']

    user = User.objects.filter(email__iexact=email).first()
    if user is None:
        return failure(messages.USER.EMAIL_NOT_FOUND, email=email)
    try:
        token = generate_token(user.pk)
        send_reset_password_email(user, token)
    except Exception as exc:
        return action_failure(exc)
    return success(messages.USER.CONFIRM_EMAIL, email=email)


@api_view(['POST'])
@permission_classes([AllowAny])
def create_password_view(request):
    s = CreatePasswordSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    result = check_token(s.validated_data['token'])
    if not result.ok:
        return failure(result.error)

    user = result.token.user
    with transaction.atomic():
        user.set_password(s.validated_data['password'])
        # a reset link proves ownership of the address
        user.email_verified = user.email_verified or timezone.now()
        user.save()
        result.token.delete()

    response = success(messages.AUTH.PASSWORD_UPDATED)
    token = sign_in(response, user)
    response.data['user'] = session_payload(token)
    return response


@api_view(['POST'])
@permission_classes([AllowAny])
def logout_view(request):
    response = success(messages.AUTH.LOGGED_OUT)
    clear_session_cookie(response)
    return response


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def session_view(request):
    """Claims of the current session as cached in its token."""
    return Response({'success': True, 'user': session_payload(request.auth)})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def menu_view(request):
    """Sidebar entries the current session is allowed to see."""
    granted = request.auth.permission_names
    menu = []
    for label, permission, items in constants.SIDEBAR:
        if permission not in granted:
            continue
        children = [{'label': l, 'url': u} for l, p, u in items if p in granted]
        if children:
            menu.append({'label': label, 'items': children})
    return Response({'success': True, 'menu': menu})


# ---------------------------------------------------------------------
# GitHub sign-in
# ---------------------------------------------------------------------
@api_view(['GET'])
@permission_classes([AllowAny])
def github_authorize_view(request):
    state = secrets.token_urlsafe(24)
    try:
        url = github.authorize_url(state)
    except github.GitHubError as exc:
        logger.warning("github sign-in unavailable: %s", exc)
        return HttpResponseRedirect(constants.AUTH_ERROR)
    response = HttpResponseRedirect(url)
    response.set_cookie(OAUTH_STATE_COOKIE, state, max_age=600, httponly=True, samesite='Lax',
                        secure=settings.SESSION_TOKEN_COOKIE_SECURE)
    return response


@api_view(['GET'])
@permission_classes([AllowAny])
def github_callback_view(request):
    s = GitHubCallbackSerializer(data=request.query_params)
    expected = request.COOKIES.get(OAUTH_STATE_COOKIE)
    if not s.is_valid() or not expected or s.validated_data.get('state') != expected:
        return HttpResponseRedirect(constants.AUTH_ERROR)

    try:
        profile = github.exchange_code(s.validated_data['code'])
    except (requests.RequestException, github.GitHubError) as exc:
        logger.warning("github code exchange failed: %s", exc)
        return HttpResponseRedirect(constants.AUTH_ERROR)

    user, _ = github.link_or_create_user(profile)
    response = HttpResponseRedirect(constants.DASHBOARD)
    response.delete_cookie(OAUTH_STATE_COOKIE)
    sign_in(response, user, provider=github.PROVIDER)
    return response
