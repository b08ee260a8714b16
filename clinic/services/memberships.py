"""
Membership catalogue, subscriptions and cash payments.
"""
from __future__ import annotations

import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from clinic.models import Fee, Membership, MembershipSubscription, Transaction

logger = logging.getLogger(__name__)


def add_membership(*, name: str, perks: list, fees: list[dict], hospitals: list) -> Membership:
    with transaction.atomic():
        membership = Membership.objects.create(name=name, perks=perks)
        Fee.objects.bulk_create([
            Fee(membership=membership, amount=f['amount'], renewal_type=f['renewal_type']) for f in fees
        ])
        if hospitals:
            membership.hospitals.set(hospitals)
    return membership


def update_membership(membership: Membership, *, name: str, perks: list, fees: list[dict] | None,
                      hospitals: list | None) -> Membership:
    with transaction.atomic():
        membership.name = name
        membership.perks = perks
        membership.save()
        if fees is not None:
            kept = []
            for f in fees:
                fee = Fee.objects.filter(membership=membership, amount=f['amount'],
                                         renewal_type=f['renewal_type']).first()
                if fee is None:
                    fee = Fee.objects.create(membership=membership, amount=f['amount'],
                                             renewal_type=f['renewal_type'])
                kept.append(fee.pk)
            # fees referenced by subscriptions are protected and stay
            (Fee.objects.filter(membership=membership).exclude(pk__in=kept)
             .filter(subscriptions__isnull=True).delete())
        if hospitals is not None:
            membership.hospitals.set(hospitals)
    return membership


def subscribe(*, membership_id, fee_id, users: list) -> list[MembershipSubscription]:
    """Create one pending subscription per user; raises ``IntegrityError``
    if any of them already holds a subscription."""
    with transaction.atomic():
        subscriptions = [
            MembershipSubscription.objects.create(user_id=u, membership_id=membership_id, fee_id=fee_id)
            for u in users
        ]
    logger.info("membership %s subscribed users=%s", membership_id, list(users))
    return subscriptions


def renewal_expiry(renewal_type: str, now=None):
    now = now or timezone.now()
    if renewal_type == Fee.RENEWAL_YEARLY:
        return now + timedelta(days=settings.DAYS_IN_YEAR)
    return now + timedelta(days=settings.DAYS_IN_MONTH)


def pay(subscription: MembershipSubscription) -> Transaction:
    fee = subscription.fee
    with transaction.atomic():
        subscription.status = MembershipSubscription.STATUS_ACTIVE
        subscription.save(update_fields=['status', 'updated_at'])
        txn = Transaction.objects.create(
            subscription=subscription,
            amount=fee.amount,
            method='cash',
            status='completed',
            expires_at=renewal_expiry(fee.renewal_type),
        )
    logger.info("subscription %s paid, expires %s", subscription.pk, txn.expires_at)
    return txn


def current_expiry(subscription: MembershipSubscription):
    txn = (subscription.transactions.filter(status='completed')
           .order_by('-created_at').first())
    return txn.expires_at if txn else None
