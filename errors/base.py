"""
Exception types raised by the audit engine.

Every error carries an ErrorContext so the structured logger can tie a
failure back to the host node, issue or setting involved. The
classification decides whether the node lookup retry loop may try again.
"""

import time
from enum import Enum
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field


class ErrorClassification(Enum):
    TRANSIENT = "transient"          # Host hiccup, the lookup may be retried
    TERMINAL = "terminal"            # Rejected or unexpected, fail the operation
    CONFIGURATION = "configuration"  # Bad settings or document snapshot


@dataclass
class ErrorContext:
    # Where a failure happened, attached to the error and to its log entry
    correlation_id: str
    timestamp: float = field(default_factory=time.time)
    component: str = ""
    operation: str = ""
    node_id: Optional[str] = None
    retry_count: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)
    stack_trace: Optional[str] = None
    recovery_suggestions: List[str] = field(default_factory=list)

    def bind(
        self,
        component: str,
        operation: Optional[str] = None,
        node_id: Optional[str] = None,
        **metadata
    ) -> "ErrorContext":
        """Stamp the raising component onto the context; None values are ignored."""
        self.component = component
        if operation:
            self.operation = operation
        if node_id:
            self.node_id = node_id
        self.metadata.update({key: value for key, value in metadata.items() if value is not None})
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correlation_id": self.correlation_id,
            "timestamp": self.timestamp,
            "component": self.component,
            "operation": self.operation,
            "node_id": self.node_id,
            "retry_count": self.retry_count,
            "metadata": self.metadata,
            "stack_trace": self.stack_trace,
            "recovery_suggestions": self.recovery_suggestions,
        }


class ContrastAuditError(Exception):
    """
    Root of the audit engine's exceptions.

    ``str()`` renders the actionable message: the error text, the recovery
    suggestions, then the node and correlation id when they are known.
    """

    def __init__(
        self,
        message: str,
        error_context: Optional[ErrorContext] = None,
        classification: ErrorClassification = ErrorClassification.TERMINAL,
        cause: Optional[Exception] = None,
        recovery_suggestions: Optional[List[str]] = None
    ):
        super().__init__(message)
        self.message = message
        self.classification = classification
        self.cause = cause
        self.recovery_suggestions = list(recovery_suggestions or [])
        self.error_context = error_context or ErrorContext(correlation_id="unknown")
        self.error_context.recovery_suggestions.extend(self.recovery_suggestions)

    def is_retryable(self) -> bool:
        return self.classification == ErrorClassification.TRANSIENT

    def get_actionable_message(self) -> str:
        sections = [self.message]

        if self.recovery_suggestions:
            sections.append("Recovery suggestions:\n" + "\n".join(
                f"  - {suggestion}" for suggestion in self.recovery_suggestions
            ))

        trailer = []
        if self.error_context.node_id:
            trailer.append(f"Node: {self.error_context.node_id}")
        if self.error_context.correlation_id != "unknown":
            trailer.append(f"Correlation ID: {self.error_context.correlation_id}")
        if trailer:
            sections.append("\n".join(trailer))

        return "\n\n".join(sections)

    def __str__(self) -> str:
        return self.get_actionable_message()


class HostInteractionError(ContrastAuditError):
    # A document host call failed. Busy or timed-out lookups are transient;
    # an explicit rejection ends the whole operation.

    def __init__(
        self,
        message: str,
        node_id: Optional[str] = None,
        operation: str = "get_node_by_id",
        rejected: bool = False,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.node_id = node_id
        self.operation = operation
        self.rejected = rejected

        suggestions = []
        if rejected:
            suggestions.append(f"The host rejected '{operation}'")
        suggestions.append("Check that the document is still open in the host")
        suggestions.append("Run a new scan to refresh node identifiers")

        if error_context:
            error_context.bind("Document Host", operation=operation, node_id=node_id)

        super().__init__(
            message=f"Host Interaction Error ({operation}): {message}",
            error_context=error_context,
            classification=ErrorClassification.TERMINAL if rejected else ErrorClassification.TRANSIENT,
            cause=cause,
            recovery_suggestions=suggestions
        )


class ConfigurationError(ContrastAuditError):
    # Settings or a document snapshot could not be used as given

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_file: Optional[str] = None,
        expected_format: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.config_key = config_key
        self.config_file = config_file
        self.expected_format = expected_format

        # Most specific hint first
        hints = [
            (expected_format, "Expected format: {}"),
            (config_file, "Check configuration file: {}"),
            (config_key, "Set required configuration: {}"),
        ]
        suggestions = [template.format(value) for value, template in hints if value]
        suggestions.append("Review CONTRAST_* environment variables and the .env file")

        if error_context:
            error_context.bind("Configuration", config_key=config_key, config_file=config_file)

        super().__init__(
            message=f"Configuration Error: {message}",
            error_context=error_context,
            classification=ErrorClassification.CONFIGURATION,
            cause=cause,
            recovery_suggestions=suggestions
        )


class FixApplicationError(ContrastAuditError):
    # A bulk color fix stopped because a host call was rejected

    def __init__(
        self,
        message: str,
        issue_key: Optional[str] = None,
        error_context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None
    ):
        self.issue_key = issue_key

        if error_context:
            error_context.bind("Fix Application", issue_key=issue_key)

        super().__init__(
            message=message,
            error_context=error_context,
            classification=ErrorClassification.TERMINAL,
            cause=cause,
            recovery_suggestions=[
                "Nodes fixed before the rejection keep their new colors; undo them in the host if needed",
                "Run a new scan and retry the fix",
            ]
        )
