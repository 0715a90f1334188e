"""
License API views.

Thin adapter over the license application handlers. Authentication
belongs to the deployment in front of this service.
"""

from datetime import timedelta

from asgiref.sync import async_to_sync
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from api.v1.license.serializers import (
    BindDeviceRequestSerializer,
    ChangeSubscriptionLevelRequestSerializer,
    IssueLicenseRequestSerializer,
    IssueLicenseResponseSerializer,
    LicenseSerializer,
    RenewLicenseRequestSerializer,
    RevokeLicenseRequestSerializer,
    ValidateLicenseRequestSerializer,
    VerdictSerializer,
)
from core.domain.clock import SystemClock
from core.infrastructure.events import event_bus
from licenses.application.commands.bind_device import BindDeviceCommand, UnbindDeviceCommand
from licenses.application.commands.change_subscription_level import (
    ChangeSubscriptionLevelCommand,
)
from licenses.application.commands.issue_license import IssueLicenseCommand
from licenses.application.commands.renew_license import RenewLicenseCommand
from licenses.application.commands.revoke_license import RevokeLicenseCommand
from licenses.application.dto.license_dto import VerdictDTO
from licenses.application.handlers.issue_license_handler import IssueLicenseHandler
from licenses.application.handlers.license_lifecycle_handlers import (
    BindDeviceHandler,
    ChangeSubscriptionLevelHandler,
    RenewLicenseHandler,
    RevokeLicenseHandler,
    UnbindDeviceHandler,
)
from licenses.application.handlers.validate_license_handler import ValidateLicenseHandler
from licenses.application.queries.validate_license import ValidateLicenseQuery
from licenses.application.services.lifecycle_controller import LifecycleController
from licenses.domain.services import ValidationEngine
from licenses.infrastructure.repositories.django_license_store import DjangoLicenseStore

# Initialize collaborators (in production, use DI container)
_store = DjangoLicenseStore()
_clock = SystemClock()
_engine = ValidationEngine(_store, clock=_clock)


def _controller() -> LifecycleController:
    """Controller built per request so settings overrides apply."""
    return LifecycleController.from_settings(_store, clock=_clock, event_bus=event_bus)


def _bad_request(serializer) -> Response:
    return Response(
        {"error": {"code": "VALIDATION_ERROR", "message": serializer.errors}},
        status=status.HTTP_400_BAD_REQUEST,
    )


class IssueLicenseView(APIView):
    """View for issuing licenses."""

    @extend_schema(
        operation_id="issue_license",
        summary="Issue License",
        description="Issue a new license key for a user at a subscription level.",
        tags=["License API"],
        request=IssueLicenseRequestSerializer,
        responses={
            201: IssueLicenseResponseSerializer,
            400: {"description": "Bad Request"},
            503: {"description": "License store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Issue a license."""
        serializer = IssueLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer)

        command = IssueLicenseCommand(
            user_id=serializer.validated_data["user_id"],
            subscription_level=serializer.validated_data["subscription_level"],
            validity_days=serializer.validated_data.get("validity_days"),
        )
        result = async_to_sync(IssueLicenseHandler(_controller()).handle)(command)
        return Response(
            IssueLicenseResponseSerializer(result).data, status=status.HTTP_201_CREATED
        )


class ValidateLicenseView(APIView):
    """View for client check-ins."""

    @extend_schema(
        operation_id="validate_license",
        summary="Validate License",
        description=(
            "Validate a license key. The first check-in that presents a device "
            "identifier binds the license to that device."
        ),
        tags=["License API"],
        request=ValidateLicenseRequestSerializer,
        responses={
            200: VerdictSerializer,
            400: {"description": "Bad Request"},
            503: {"description": "License store unavailable"},
        },
    )
    def post(self, request: Request) -> Response:
        """Validate a license key."""
        serializer = ValidateLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer)

        query = ValidateLicenseQuery(
            license_key=serializer.validated_data["license_key"],
            device_id=serializer.validated_data.get("device_id") or None,
        )
        handler = ValidateLicenseHandler(engine=_engine, controller=_controller())
        verdict = async_to_sync(handler.handle)(query)
        return Response(VerdictSerializer(VerdictDTO.from_verdict(verdict)).data)


class RenewLicenseView(APIView):
    """View for renewing licenses."""

    @extend_schema(
        operation_id="renew_license",
        summary="Renew License",
        tags=["License API"],
        request=RenewLicenseRequestSerializer,
        responses={
            200: LicenseSerializer,
            404: {"description": "License not found"},
            409: {"description": "License is revoked"},
        },
    )
    def post(self, request: Request, license_key: str) -> Response:
        """Extend a license."""
        serializer = RenewLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer)

        command = RenewLicenseCommand(
            license_key=license_key,
            extension=timedelta(days=serializer.validated_data["extension_days"]),
        )
        result = async_to_sync(RenewLicenseHandler(_controller()).handle)(command)
        return Response(LicenseSerializer(result).data)


class RevokeLicenseView(APIView):
    """View for revoking licenses."""

    @extend_schema(
        operation_id="revoke_license",
        summary="Revoke License",
        description="Revoke a license permanently. Revoking twice succeeds.",
        tags=["License API"],
        request=RevokeLicenseRequestSerializer,
        responses={
            200: LicenseSerializer,
            404: {"description": "License not found"},
        },
    )
    def post(self, request: Request, license_key: str) -> Response:
        """Revoke a license."""
        serializer = RevokeLicenseRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer)

        command = RevokeLicenseCommand(
            license_key=license_key, reason=serializer.validated_data["reason"]
        )
        result = async_to_sync(RevokeLicenseHandler(_controller()).handle)(command)
        return Response(LicenseSerializer(result).data)


class ChangeSubscriptionLevelView(APIView):
    """View for upgrading or downgrading licenses."""

    @extend_schema(
        operation_id="change_subscription_level",
        summary="Change Subscription Level",
        tags=["License API"],
        request=ChangeSubscriptionLevelRequestSerializer,
        responses={
            200: LicenseSerializer,
            404: {"description": "License not found"},
            409: {"description": "License is revoked"},
        },
    )
    def post(self, request: Request, license_key: str) -> Response:
        """Change a license's tier."""
        serializer = ChangeSubscriptionLevelRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer)

        command = ChangeSubscriptionLevelCommand(
            license_key=license_key,
            subscription_level=serializer.validated_data["subscription_level"],
        )
        result = async_to_sync(ChangeSubscriptionLevelHandler(_controller()).handle)(command)
        return Response(LicenseSerializer(result).data)


class DeviceBindingView(APIView):
    """View for explicit device binding management."""

    @extend_schema(
        operation_id="bind_device",
        summary="Bind Device",
        description="Bind a license to a device. Set allow_rebind to move an existing binding.",
        tags=["License API"],
        request=BindDeviceRequestSerializer,
        responses={
            200: LicenseSerializer,
            404: {"description": "License not found"},
            409: {"description": "License revoked or bound to another device"},
        },
    )
    def put(self, request: Request, license_key: str) -> Response:
        """Bind or rebind a device."""
        serializer = BindDeviceRequestSerializer(data=request.data)
        if not serializer.is_valid():
            return _bad_request(serializer)

        command = BindDeviceCommand(
            license_key=license_key,
            device_id=serializer.validated_data["device_id"],
            allow_rebind=serializer.validated_data["allow_rebind"],
        )
        result = async_to_sync(BindDeviceHandler(_controller()).handle)(command)
        return Response(LicenseSerializer(result).data)

    @extend_schema(
        operation_id="unbind_device",
        summary="Unbind Device",
        tags=["License API"],
        request=None,
        responses={
            200: LicenseSerializer,
            404: {"description": "License not found"},
            409: {"description": "License is revoked"},
        },
    )
    def delete(self, request: Request, license_key: str) -> Response:
        """Clear the device binding."""
        command = UnbindDeviceCommand(license_key=license_key)
        result = async_to_sync(UnbindDeviceHandler(_controller()).handle)(command)
        return Response(LicenseSerializer(result).data)
