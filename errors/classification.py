import traceback
import uuid
from typing import Dict, Any, Optional
from enum import Enum

from .base import (
    ContrastAuditError,
    HostInteractionError,
    ErrorClassification,
    ErrorContext,
)


# Standard exceptions a host bridge raises for a busy or dropped connection
TRANSIENT_EXCEPTIONS = (TimeoutError, ConnectionError)


class RecoveryStrategy(Enum):
    RETRY_WITH_BACKOFF = "retry_with_backoff"
    SKIP_NODE = "skip_node"
    FAIL_FAST = "fail_fast"


def create_error_context(
    correlation_id: Optional[str] = None,
    component: str = "",
    operation: str = "",
    node_id: Optional[str] = None,
    retry_count: int = 0,
    **metadata
) -> ErrorContext:
    """Build an ErrorContext, capturing the active traceback when called inside an except block."""
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())[:8]

    stack_trace = traceback.format_exc()
    if stack_trace.strip() == "NoneType: None":
        stack_trace = None

    return ErrorContext(
        correlation_id=correlation_id,
        component=component,
        operation=operation,
        node_id=node_id,
        retry_count=retry_count,
        metadata=metadata,
        stack_trace=stack_trace
    )


def classify_error(exception: Exception) -> ErrorClassification:
    if isinstance(exception, ContrastAuditError):
        return exception.classification
    if isinstance(exception, TRANSIENT_EXCEPTIONS):
        return ErrorClassification.TRANSIENT
    return ErrorClassification.TERMINAL


def get_recovery_strategy(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None
) -> RecoveryStrategy:
    """
    Pick what the caller should do next about ``exception``.

    Host lookups are retried with backoff until ``retries_exhausted`` is set
    in ``context``, after which the node is skipped. Rejections and every
    other error fail fast.
    """
    context = context or {}

    if isinstance(exception, HostInteractionError):
        if exception.rejected:
            return RecoveryStrategy.FAIL_FAST
        if context.get("retries_exhausted"):
            return RecoveryStrategy.SKIP_NODE
        return RecoveryStrategy.RETRY_WITH_BACKOFF

    if classify_error(exception) == ErrorClassification.TRANSIENT:
        return RecoveryStrategy.RETRY_WITH_BACKOFF

    return RecoveryStrategy.FAIL_FAST


def convert_to_framework_exception(
    exception: Exception,
    context: Optional[ErrorContext] = None,
    component: str = "Unknown",
    operation: str = "Unknown"
) -> ContrastAuditError:
    # Wrap a standard exception so it can be logged like an audit error
    if isinstance(exception, ContrastAuditError):
        return exception

    if context is None:
        context = create_error_context(component=component, operation=operation)

    if isinstance(exception, TRANSIENT_EXCEPTIONS):
        return HostInteractionError(
            message=str(exception),
            node_id=context.node_id,
            error_context=context,
            cause=exception
        )

    return ContrastAuditError(
        message=str(exception),
        error_context=context,
        classification=ErrorClassification.TERMINAL,
        cause=exception
    )
