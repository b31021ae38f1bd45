"""Discriminated success/error result returned by every public operation."""

import functools
import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from requests.exceptions import RequestException

from trendwire.errors import GoogleTrendsError, NetworkError, ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Exactly one of ``data`` or ``error``.

    Build instances with :meth:`success` or :meth:`failure`; constructing
    one with both members set (or neither) raises ``ValueError``.
    """

    data: Optional[T] = None
    error: Optional[GoogleTrendsError] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("Result requires exactly one of data or error")

    @classmethod
    def success(cls, data: T) -> "Result[T]":
        return cls(data=data)

    @classmethod
    def failure(cls, error: GoogleTrendsError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return ``data`` or raise the stored error."""
        if self.error is not None:
            raise self.error
        return self.data


def classify(exc: Exception) -> GoogleTrendsError:
    """Map any exception onto one of the three public error kinds.

    Args:
        exc: The exception that escaped an operation.

    Returns:
        *exc* itself when already classified; a :class:`NetworkError` for
        ``requests`` failures; a :class:`ParseError` otherwise.
    """
    if isinstance(exc, GoogleTrendsError):
        return exc
    if isinstance(exc, RequestException):
        status = getattr(getattr(exc, "response", None), "status_code", None)
        return NetworkError(f"Request failed: {exc}", status_code=status)
    logger.error("Unexpected failure while decoding response", exc_info=exc)
    return ParseError(f"Failed to parse response: {exc}",
                      details=type(exc).__name__)


def capture_errors(func: Callable[..., T]) -> Callable[..., Result[T]]:
    """Wrap an operation so it returns a :class:`Result` and never raises."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Result[T]:
        try:
            return Result.success(func(*args, **kwargs))
        except Exception as exc:  # noqa: BLE001 - public boundary
            error = classify(exc)
            logger.warning("%s failed: %s: %s", func.__name__,
                           type(error).__name__, error.message)
            return Result.failure(error)

    return wrapper
