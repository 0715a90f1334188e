"""
Serializers for License API endpoints.
"""

from django.conf import settings
from rest_framework import serializers

SUBSCRIPTION_LEVELS = ["free", "basic", "pro", "enterprise"]
MAX_WINDOW_DAYS = getattr(settings, "LICENSE_MAX_WINDOW_DAYS", 36500)


class IssueLicenseRequestSerializer(serializers.Serializer):
    """Serializer for issue license request."""

    user_id = serializers.CharField(required=True, max_length=255)
    subscription_level = serializers.ChoiceField(choices=SUBSCRIPTION_LEVELS, required=True)
    validity_days = serializers.IntegerField(
        required=False, min_value=1, max_value=MAX_WINDOW_DAYS, allow_null=True
    )


class ValidateLicenseRequestSerializer(serializers.Serializer):
    """Serializer for validate license request."""

    license_key = serializers.CharField(required=True, max_length=100)
    device_id = serializers.CharField(
        required=False, max_length=255, allow_null=True, allow_blank=True
    )


class RenewLicenseRequestSerializer(serializers.Serializer):
    """Serializer for renew license request."""

    extension_days = serializers.IntegerField(
        required=True, min_value=1, max_value=MAX_WINDOW_DAYS
    )


class RevokeLicenseRequestSerializer(serializers.Serializer):
    """Serializer for revoke license request."""

    reason = serializers.CharField(required=False, max_length=500, allow_blank=True, default="")


class ChangeSubscriptionLevelRequestSerializer(serializers.Serializer):
    """Serializer for tier change request."""

    subscription_level = serializers.ChoiceField(choices=SUBSCRIPTION_LEVELS, required=True)


class BindDeviceRequestSerializer(serializers.Serializer):
    """Serializer for explicit device binding request."""

    device_id = serializers.CharField(required=True, max_length=255)
    allow_rebind = serializers.BooleanField(required=False, default=False)


class LicenseSerializer(serializers.Serializer):
    """Serializer for LicenseDTO."""

    id = serializers.UUIDField()
    user_id = serializers.CharField()
    subscription_level = serializers.CharField()
    status = serializers.CharField()
    issued_at = serializers.DateTimeField()
    expires_at = serializers.DateTimeField()
    bound_device_id = serializers.CharField(allow_null=True)
    revoked_at = serializers.DateTimeField(allow_null=True)
    revocation_reason = serializers.CharField(allow_null=True)


class IssueLicenseResponseSerializer(serializers.Serializer):
    """Serializer for issue license response."""

    key = serializers.CharField()
    license = LicenseSerializer()


class VerdictSerializer(serializers.Serializer):
    """Serializer for validation verdicts."""

    valid = serializers.BooleanField()
    subscription_level = serializers.CharField(allow_null=True)
    reason = serializers.CharField(allow_null=True)
