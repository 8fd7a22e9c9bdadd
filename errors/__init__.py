# Contrast Harmony error hierarchy
# Structured errors with classification, recovery strategies and JSON logging

from .base import (
    ContrastAuditError,
    HostInteractionError,
    ConfigurationError,
    FixApplicationError,
    ErrorClassification,
    ErrorContext,
)

from .classification import (
    classify_error,
    get_recovery_strategy,
    create_error_context,
    convert_to_framework_exception,
    RecoveryStrategy,
)

from .logging import (
    StructuredErrorLogger,
    JSONFormatter,
    log_error_with_context,
    log_recovery_attempt,
    get_error_correlation_id,
    configure_error_logging,
)

__all__ = [
    # Base exceptions
    "ContrastAuditError",
    "HostInteractionError",
    "ConfigurationError",
    "FixApplicationError",

    # Error classification
    "ErrorClassification",
    "ErrorContext",
    "classify_error",
    "get_recovery_strategy",
    "create_error_context",
    "convert_to_framework_exception",
    "RecoveryStrategy",

    # Structured logging
    "StructuredErrorLogger",
    "JSONFormatter",
    "log_error_with_context",
    "log_recovery_attempt",
    "get_error_correlation_id",
    "configure_error_logging",
]
