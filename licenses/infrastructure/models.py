"""
LicenseRecord model.
"""
import uuid

from django.db import models


class LicenseRecord(models.Model):
    """
    An issued license key and the grant it represents.

    Rows are never deleted; revocation is a status change.
    """

    STATUS_CHOICES = [
        ("active", "Active"),
        ("revoked", "Revoked"),
    ]

    LEVEL_CHOICES = [
        ("free", "Free"),
        ("basic", "Basic"),
        ("pro", "Pro"),
        ("enterprise", "Enterprise"),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    key = models.CharField(max_length=100, unique=True, db_index=True)
    user_id = models.CharField(max_length=255, db_index=True)
    subscription_level = models.CharField(max_length=20, choices=LEVEL_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="active")
    issued_at = models.DateTimeField()
    expires_at = models.DateTimeField(db_index=True)
    bound_device_id = models.CharField(max_length=255, null=True, blank=True)
    revoked_at = models.DateTimeField(null=True, blank=True)
    revocation_reason = models.CharField(max_length=500, blank=True, default="")
    updated_at = models.DateTimeField()
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "license_records"
        ordering = ["-issued_at"]
        indexes = [
            models.Index(fields=["status", "expires_at"], name="license_status_expires_idx"),
            models.Index(fields=["user_id", "status"], name="license_user_status_idx"),
        ]

    def __str__(self):
        return f"{self.user_id} - {self.subscription_level} ({self.status})"
