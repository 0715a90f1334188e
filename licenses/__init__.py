"""
Licenses module - License key issuance and validation.

This module handles:
- LicenseRecord entity and key generation
- License validation (ValidationEngine)
- License lifecycle (issue, renew, bind, unbind, revoke, change tier)
- License store port and its Django and in-memory adapters
"""
