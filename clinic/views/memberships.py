"""
Membership catalogue and subscription endpoints.
"""
from __future__ import annotations

from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated

from clinic import messages
from clinic.exceptions import action_failure, failure, invalid_inputs, success
from clinic.models import Membership, MembershipSubscription
from clinic.permissions import IsAdminRole, is_admin
from clinic.serializers.memberships import (
    MembershipInputSerializer,
    SubscribeSerializer,
    membership_payload,
    subscription_payload,
)
from clinic.serializers.users import IdsSerializer
from clinic.services import memberships as membership_service
from clinic.views.listing import BadListParams, paginate, search


def _memberships():
    return Membership.objects.order_by('name').prefetch_related('fees', 'hospitals')


def _subscriptions():
    return (MembershipSubscription.objects.select_related('user', 'membership', 'fee')
            .prefetch_related('transactions').order_by('-created_at'))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def memberships(request):
    if request.method == 'GET':
        qs = search(_memberships(), request, ['name'])
        try:
            items, pagination = paginate(qs, request)
        except BadListParams:
            return invalid_inputs()
        return success(data=[membership_payload(m) for m in items], pagination=pagination)

    if not is_admin(request):
        return failure(messages.AUTH.UNAUTHORIZED, 403)
    s = MembershipInputSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    vd = s.validated_data
    try:
        membership = membership_service.add_membership(
            name=vd['name'], perks=vd.get('perks', []), fees=vd['fees'], hospitals=vd.get('hospitals', []))
    except Exception as exc:
        return action_failure(exc)
    return success(messages.MEMBERSHIP.ADDED, code=201, id=membership.pk)


@api_view(['GET', 'PUT', 'DELETE'])
@permission_classes([IsAuthenticated])
def membership_detail(request, membership_id: int):
    membership = _memberships().filter(pk=membership_id).first()
    if membership is None:
        return failure(messages.SYSTEM.BAD_REQUEST, 404)
    if request.method == 'GET':
        return success(membership=membership_payload(membership))
    if not is_admin(request):
        return failure(messages.AUTH.UNAUTHORIZED, 403)

    if request.method == 'DELETE':
        try:
            membership.delete()
        except Exception as exc:
            return action_failure(exc)
        return success(messages.MEMBERSHIP.DELETED)

    s = MembershipInputSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    vd = s.validated_data
    try:
        membership_service.update_membership(
            membership, name=vd['name'], perks=vd.get('perks', []),
            fees=vd.get('fees'), hospitals=vd.get('hospitals'))
    except Exception as exc:
        return action_failure(exc)
    return success(messages.MEMBERSHIP.UPDATED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def delete_memberships(request):
    s = IdsSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    try:
        Membership.objects.filter(pk__in=s.validated_data['ids']).delete()
    except Exception as exc:
        return action_failure(exc)
    return success(messages.MEMBERSHIP.BULK_DELETED)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def subscriptions(request):
    """``GET`` lists subscriptions (own only for non-admins); ``POST``
    subscribes users to a membership as pending."""
    if request.method == 'GET':
        qs = _subscriptions()
        if not is_admin(request):
            qs = qs.filter(user=request.user)
        qs = search(qs, request, ['user__name', 'user__email', 'membership__name'])
        try:
            items, pagination = paginate(qs, request)
        except BadListParams:
            return invalid_inputs()
        data = [subscription_payload(s, membership_service.current_expiry(s)) for s in items]
        return success(data=data, pagination=pagination)

    if not is_admin(request):
        return failure(messages.AUTH.UNAUTHORIZED, 403)
    s = SubscribeSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    vd = s.validated_data
    try:
        created = membership_service.subscribe(
            membership_id=vd['membership'], fee_id=vd['fee'], users=vd['users'])
    except Exception as exc:
        return action_failure(exc)
    return success(messages.SUBSCRIPTION.ADDED, code=201, ids=[c.pk for c in created])


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def pay(request, subscription_id: int):
    subscription = _subscriptions().filter(pk=subscription_id).first()
    if subscription is None:
        return invalid_inputs()
    try:
        txn = membership_service.pay(subscription)
    except Exception as exc:
        return action_failure(exc)
    return success(messages.SUBSCRIPTION.PAID, expiresAt=txn.expires_at.isoformat())


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def subscription_detail(request, subscription_id: int):
    deleted, _ = MembershipSubscription.objects.filter(pk=subscription_id).delete()
    if not deleted:
        return failure(messages.SYSTEM.BAD_REQUEST, 404)
    return success(messages.SUBSCRIPTION.DELETED)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def delete_subscriptions(request):
    s = IdsSerializer(data=request.data)
    if not s.is_valid():
        return invalid_inputs()
    MembershipSubscription.objects.filter(pk__in=s.validated_data['ids']).delete()
    return success(messages.SUBSCRIPTION.BULK_DELETED)
