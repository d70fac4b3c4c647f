"""Counted retries for engine calls."""

import logging
from typing import Callable, Tuple, Type, TypeVar

from dokken.errors import (
    EngineIOError,
    EngineTimeoutError,
    ServerError,
    UnexpectedResponseError,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Only errors that can be fixed by asking again
RETRYABLE_ERRORS: Tuple[Type[Exception], ...] = (
    ServerError,
    UnexpectedResponseError,
    EngineTimeoutError,
    EngineIOError,
)


class RetryGovernor:
    """Runs an operation, repeating it on transient engine errors.

    ``retries`` is the number of extra attempts after the first one, so
    ``0`` means a single attempt. There is no delay between attempts.
    """

    def __init__(self, retries: int):
        if retries < 0:
            raise ValueError(f"retries must be non-negative, got {retries}")
        self.retries = retries

    def call(self, operation: Callable[[], T]) -> T:
        """Call ``operation`` and return its result."""
        remaining = self.retries
        while True:
            try:
                return operation()
            except RETRYABLE_ERRORS as e:
                if remaining <= 0:
                    raise
                remaining -= 1
                logger.debug(f"Transient engine error, retrying ({remaining} left): {e}")

    __call__ = call


def with_retries(operation: Callable[[], T], retries: int) -> T:
    """Run ``operation`` under a :class:`RetryGovernor`."""
    return RetryGovernor(retries).call(operation)
