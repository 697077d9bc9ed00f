"""Uniform error wrapping for service operations."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from rsvp_gateway.errors import ServiceError, TypedError, error_message

logger = logging.getLogger(__name__)


@contextmanager
def service_operation(context: str) -> Iterator[None]:
    """Re-raise any failure inside the block as a ServiceError.

    - TypedError: logged, re-raised with its display message
    - ServiceError: passed through unchanged (nested operations)
    - anything else: re-raised as "Failed to {context}: ..."

    Args:
        context: What the operation attempts, e.g. "fetch item with ID 42"
    """
    try:
        yield
    except ServiceError:
        raise
    except TypedError as e:
        logger.error("Service error in %s: %r", context, e)
        raise ServiceError(error_message(e), error=e) from e
    except Exception as e:
        logger.exception("Unexpected error in %s", context)
        raise ServiceError(f"Failed to {context}: {e}") from e
