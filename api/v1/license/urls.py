"""
URL configuration for license API endpoints.
"""

from django.urls import path

from api.v1.license import views

app_name = "license"

urlpatterns = [
    path(
        "",
        views.IssueLicenseView.as_view(),
        name="issue-license",
    ),
    path(
        "validate",
        views.ValidateLicenseView.as_view(),
        name="validate-license",
    ),
    path(
        "<str:license_key>/renew",
        views.RenewLicenseView.as_view(),
        name="renew-license",
    ),
    path(
        "<str:license_key>/revoke",
        views.RevokeLicenseView.as_view(),
        name="revoke-license",
    ),
    path(
        "<str:license_key>/tier",
        views.ChangeSubscriptionLevelView.as_view(),
        name="change-subscription-level",
    ),
    path(
        "<str:license_key>/device",
        views.DeviceBindingView.as_view(),
        name="device-binding",
    ),
]
