"""
Decorators for logging SQS facade operations.
"""
import functools
import time
import uuid
from typing import Any, Callable, TypeVar

from logger_config import get_logger
from utils.exceptions import ServiceError, SQSError

logger = get_logger(__name__)

F = TypeVar('F', bound=Callable[..., Any])


def sqs_operation(action: str) -> Callable[[F], F]:
    """
    Decorator for facade methods that perform one remote action.

    Provides:
    - Correlation IDs tying the start and outcome log lines together
    - Elapsed time on success
    - Service error code and request id on failure

    Errors are always re-raised to the caller.

    Args:
        action: Remote action name used in log lines

    Returns:
        Decorator for the facade method
    """
    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            correlation_id = str(uuid.uuid4())
            started = time.monotonic()

            logger.debug(
                f"{action} started",
                extra={"correlation_id": correlation_id, "action": action}
            )

            try:
                result = func(*args, **kwargs)
            except ServiceError as e:
                logger.warning(
                    f"{action} rejected by service: {e.code} (request_id={e.request_id})",
                    extra={"correlation_id": correlation_id, "action": action}
                )
                raise
            except SQSError as e:
                logger.error(
                    f"{action} failed: {type(e).__name__}: {e.message}",
                    extra={"correlation_id": correlation_id, "action": action}
                )
                raise

            elapsed_ms = (time.monotonic() - started) * 1000
            logger.info(
                f"{action} completed in {elapsed_ms:.1f} ms",
                extra={"correlation_id": correlation_id, "action": action}
            )
            return result

        return wrapper  # type: ignore[return-value]

    return decorator
