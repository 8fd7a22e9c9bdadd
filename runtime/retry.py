import logging
from typing import Optional, Any

from tenacity import (
    AsyncRetrying,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception,
)

from errors import (
    HostInteractionError,
    create_error_context,
    log_error_with_context,
    log_recovery_attempt,
    get_error_correlation_id,
)

from .settings import AuditSettings


logger = logging.getLogger(__name__)


def _is_retryable_host_error(exception: BaseException) -> bool:
    return isinstance(exception, HostInteractionError) and exception.is_retryable()


def create_lookup_retrying(
    settings: AuditSettings,
    node_id: str,
    correlation_id: Optional[str] = None
) -> AsyncRetrying:
    # Retry policy for host node lookups; only transient host errors are retried

    def before_sleep(retry_state):
        correlation_msg = f" [correlation_id: {correlation_id}]" if correlation_id else ""
        logger.warning(
            f"Retrying lookup of node {node_id}{correlation_msg} - "
            f"attempt {retry_state.attempt_number}/{settings.lookup_max_attempts} "
            f"after {retry_state.seconds_since_start:.2f}s"
        )

    def after_attempt(retry_state):
        if retry_state.outcome and retry_state.outcome.failed:
            log_recovery_attempt(
                correlation_id=correlation_id or "unknown",
                strategy="retry_with_backoff",
                attempt_number=retry_state.attempt_number,
                success=False,
                node_id=node_id,
                exception=str(retry_state.outcome.exception())
            )

    return AsyncRetrying(
        stop=stop_after_attempt(settings.lookup_max_attempts),
        wait=wait_exponential(multiplier=settings.lookup_base_wait_seconds, max=5.0),
        retry=retry_if_exception(_is_retryable_host_error),
        before_sleep=before_sleep,
        after=after_attempt,
        reraise=True
    )


async def lookup_node(document, node_id: str, settings: Optional[AuditSettings] = None) -> Optional[Any]:
    # Resolve a node id through the document host with retries
    # A node that stays unreachable after all attempts is reported missing (None);
    # a rejected lookup propagates to the caller
    settings = settings or AuditSettings()
    correlation_id = get_error_correlation_id()

    try:
        async for attempt in create_lookup_retrying(settings, node_id, correlation_id):
            with attempt:
                return await document.get_node_by_id(node_id)
    except HostInteractionError as e:
        if e.rejected:
            raise

        context = create_error_context(
            correlation_id=correlation_id,
            component="Document Host",
            operation="exhausted_lookup_retries",
            node_id=node_id,
            retry_count=settings.lookup_max_attempts,
            retries_exhausted=True
        )
        log_error_with_context(e, context, level="warning")
        logger.info(f"Skipping node {node_id}: lookup failed after {settings.lookup_max_attempts} attempts")
        return None
