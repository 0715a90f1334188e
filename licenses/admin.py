"""
Django admin configuration for licenses app.
"""
from django.contrib import admin
from django.utils.html import format_html

from licenses.infrastructure.models import LicenseRecord


@admin.register(LicenseRecord)
class LicenseRecordAdmin(admin.ModelAdmin):
    """Admin interface for LicenseRecord model."""

    list_display = [
        "masked_key",
        "user_id",
        "subscription_level",
        "status_display",
        "bound_device_id",
        "expires_at",
        "issued_at",
    ]
    list_filter = ["status", "subscription_level", "expires_at", "issued_at"]
    search_fields = ["user_id", "bound_device_id"]
    readonly_fields = [
        "id",
        "masked_key",
        "issued_at",
        "revoked_at",
        "updated_at",
        "version",
    ]
    exclude = ["key"]
    fieldsets = (
        (
            "Basic Information",
            {
                "fields": ("id", "masked_key", "user_id", "subscription_level", "status"),
            },
        ),
        (
            "Binding",
            {
                "fields": ("bound_device_id",),
            },
        ),
        (
            "Lifecycle",
            {
                "fields": ("issued_at", "expires_at", "revoked_at", "revocation_reason"),
            },
        ),
        (
            "Concurrency",
            {
                "fields": ("updated_at", "version"),
                "classes": ("collapse",),
            },
        ),
    )

    def masked_key(self, obj):
        """Show only the tail of the key."""
        from licenses.domain.license_key import mask_key

        return mask_key(obj.key)

    masked_key.short_description = "Key"

    def status_display(self, obj):
        """Display status with color coding."""
        colors = {
            "active": "green",
            "revoked": "red",
        }
        color = colors.get(obj.status, "black")
        return format_html(
            '<span style="color: {}; font-weight: bold;">{}</span>',
            color,
            obj.status.upper(),
        )

    status_display.short_description = "Status"

    def has_add_permission(self, request):
        """Licenses are issued through the API so keys come from the generator."""
        return False
