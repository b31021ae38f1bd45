"""Classified failures surfaced through :class:`trendwire.result.Result`."""

from typing import Any, Optional


class GoogleTrendsError(Exception):
    """Base class for every failure a public operation can report.

    Args:
        message: Human-readable reason.
        status_code: HTTP status, when the failure came from a response.
        details: Extra context (e.g. a truncated response body).

    Attributes:
        code: Stable machine-readable classification, set per subclass.
    """

    code = "GOOGLE_TRENDS_ERROR"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details

    def __repr__(self) -> str:
        return (f"{type(self).__name__}({self.message!r}, "
                f"status_code={self.status_code!r})")


class InvalidRequestError(GoogleTrendsError):
    """Caller input failed a check made before contacting the provider."""

    code = "INVALID_REQUEST"


class NetworkError(GoogleTrendsError):
    """The transport failed or the provider rejected the request."""

    code = "NETWORK_ERROR"


class ParseError(GoogleTrendsError):
    """The response body did not match any recognised envelope or container."""

    code = "PARSE_ERROR"
