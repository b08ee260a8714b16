from rest_framework import serializers

from clinic.models import Fee, Hospital, Membership, MembershipSubscription
from clinic.serializers.fields import CleanCharField, IdListField


class FeeSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    renewal_type = serializers.ChoiceField(choices=[c for c, _ in Fee.RENEWAL_CHOICES])


class MembershipInputSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    perks = serializers.ListField(child=CleanCharField(max_length=255), allow_empty=True, required=False)
    fees = FeeSerializer(many=True, allow_empty=False)
    hospitals = IdListField(required=False, allow_empty=True)

    def validate_hospitals(self, ids):
        found = set(Hospital.objects.filter(pk__in=ids).values_list('pk', flat=True))
        if found != set(ids):
            raise serializers.ValidationError('unknown hospital')
        return ids


class SubscribeSerializer(serializers.Serializer):
    membership = serializers.IntegerField(min_value=1)
    fee = serializers.IntegerField(min_value=1)
    users = IdListField(allow_empty=False)

    def validate(self, attrs):
        if not Fee.objects.filter(pk=attrs['fee'], membership_id=attrs['membership']).exists():
            raise serializers.ValidationError('fee does not belong to membership')
        return attrs


def membership_payload(m: Membership) -> dict:
    return {
        'id': m.pk,
        'name': m.name,
        'perks': m.perks,
        'fees': [{'id': f.pk, 'amount': str(f.amount), 'renewalType': f.renewal_type} for f in m.fees.all()],
        'hospitals': [{'id': h.pk, 'name': h.name} for h in m.hospitals.all()],
    }


def subscription_payload(s: MembershipSubscription, expires_at=None) -> dict:
    return {
        'id': s.pk,
        'status': s.status,
        'user': {'id': s.user_id, 'name': s.user.name, 'email': s.user.email},
        'membership': {'id': s.membership_id, 'name': s.membership.name},
        'fee': {'id': s.fee_id, 'amount': str(s.fee.amount), 'renewalType': s.fee.renewal_type},
        'expiresAt': expires_at.isoformat() if expires_at else None,
    }
