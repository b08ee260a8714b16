import bleach
from rest_framework import serializers


class CleanCharField(serializers.CharField):
    """CharField with HTML stripped via bleach."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return bleach.clean(value, tags=[], strip=True).strip()


class IdListField(serializers.ListField):
    def __init__(self, **kwargs):
        kwargs.setdefault('child', serializers.IntegerField(min_value=1))
        super().__init__(**kwargs)


class YesNoField(serializers.Field):
    """Accepts booleans or the 'yes'/'no' strings sent by HTML forms."""

    def to_internal_value(self, data):
        if isinstance(data, bool):
            return data
        value = str(data).strip().lower()
        if value in ('yes', 'true', '1', 'on'):
            return True
        if value in ('no', 'false', '0', 'off', ''):
            return False
        raise serializers.ValidationError('expected yes or no')

    def to_representation(self, value):
        return 'yes' if value else 'no'
