"""
Domain exceptions.

Domain exceptions represent business rule violations
and domain-specific error conditions.
"""


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    def __init__(self, message: str, code: str = None):
        """
        Initialize domain exception.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
        """
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class LicenseException(DomainException):
    """Base exception for license-related errors."""

    pass


class LicenseNotFoundError(LicenseException):
    """Raised when no record exists for a license key."""

    def __init__(self, message: str = "License not found"):
        super().__init__(message, code="LICENSE_NOT_FOUND")


class DuplicateKeyError(LicenseException):
    """Raised when a record with the same key is already stored."""

    def __init__(self, message: str = "License key already exists"):
        super().__init__(message, code="DUPLICATE_KEY")


class LicenseRevokedError(LicenseException):
    """Raised when an operation targets a revoked license."""

    def __init__(self, message: str = "License is revoked"):
        super().__init__(message, code="LICENSE_REVOKED")


class AlreadyBoundError(LicenseException):
    """Raised when binding a license that is bound to a different device."""

    def __init__(self, message: str = "License is already bound to a device"):
        super().__init__(message, code="ALREADY_BOUND")


class IssuanceFailedError(LicenseException):
    """Raised when no unique key could be issued within the retry budget."""

    def __init__(self, message: str = "Could not issue a unique license key"):
        super().__init__(message, code="ISSUANCE_FAILED")


class KeyGenerationError(LicenseException):
    """Raised when the entropy source fails."""

    def __init__(self, message: str = "Entropy source failure"):
        super().__init__(message, code="KEY_GENERATION_FAILED")


class StoreUnavailableError(DomainException):
    """Raised when the license store cannot be reached in time."""

    def __init__(self, message: str = "License store unavailable"):
        super().__init__(message, code="STORE_UNAVAILABLE")
