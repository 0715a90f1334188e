"""
Prometheus metrics for the license service.

Custom metrics for business logic and performance monitoring.
"""

from prometheus_client import Counter, Histogram

# License lifecycle metrics
licenses_issued_total = Counter(
    "licenses_issued_total",
    "Total licenses issued",
    ["subscription_level"],
)

licenses_renewed_total = Counter(
    "licenses_renewed_total",
    "Total licenses renewed",
)

licenses_revoked_total = Counter(
    "licenses_revoked_total",
    "Total licenses revoked",
)

devices_bound_total = Counter(
    "devices_bound_total",
    "Total device bindings",
    ["rebound"],
)

subscription_level_changes_total = Counter(
    "subscription_level_changes_total",
    "Total subscription tier changes",
    ["new_level"],
)

key_collisions_total = Counter(
    "license_key_collisions_total",
    "Generated keys rejected as duplicates",
)

# Validation metrics
license_validations_total = Counter(
    "license_validations_total",
    "Total license validations by result",
    ["result"],
)

license_validation_duration_seconds = Histogram(
    "license_validation_duration_seconds",
    "License validation duration in seconds",
    buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
)

# Store metrics
store_errors_total = Counter(
    "license_store_errors_total",
    "License store failures",
    ["operation"],
)

# Notification metrics
expiration_warnings_total = Counter(
    "expiration_warnings_total",
    "Expiration warnings handed to the notification sink",
    ["outcome"],
)

# Error metrics
errors_total = Counter(
    "errors_total",
    "Total errors",
    ["error_type", "endpoint"],
)
