"""HTTP transport for Google Trends requests.

Maps connection failures and non-2xx responses onto
:class:`~trendwire.errors.NetworkError`.  Calls are made once; there is no
retry.
"""

import logging
from typing import Dict, Optional, Protocol, TypedDict

import requests
from requests.exceptions import ChunkedEncodingError, ConnectionError, Timeout

from trendwire.config import Settings, load_settings
from trendwire.errors import NetworkError

logger = logging.getLogger(__name__)

# Statuses the provider uses for throttling and temporary outages.
_TRANSIENT_STATUS_CODES = {429, 500, 502, 503, 504}


class _EndpointRequired(TypedDict):
    method: str
    host: str
    path: str


class Endpoint(_EndpointRequired, total=False):
    """Everything needed to issue one provider request."""

    headers: Dict[str, str]
    params: Dict[str, str]
    data: str


class Transport(Protocol):
    def fetch(self, endpoint: Endpoint) -> str: ...


def endpoint_url(endpoint: Endpoint) -> str:
    return f"https://{endpoint['host']}{endpoint['path']}"


def _raise_for_status(response: requests.Response) -> None:
    """Raise :class:`NetworkError` for any non-2xx response.

    Args:
        response: The provider's HTTP response.

    Raises:
        NetworkError: Carrying the status code and the start of the body.
    """
    status = response.status_code
    if 200 <= status < 300:
        return

    if status == 429:
        message = "Request failed with status 429 (rate limited)"
    elif status in _TRANSIENT_STATUS_CODES:
        message = f"Request failed with status {status} (server error)"
    else:
        message = f"Request failed with status {status}"
    raise NetworkError(message, status_code=status,
                       details=response.text[:200])


class RequestsTransport:
    """Issue provider requests over a shared :class:`requests.Session`.

    Args:
        settings: Timeout and default headers.  Loaded from the environment
            when omitted.
        session: Session to reuse; a new one is created when omitted.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 session: Optional[requests.Session] = None) -> None:
        self.settings: Settings = settings or load_settings()
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": self.settings["user_agent"],
            "Accept": "application/json, text/plain, */*",
            "Referer": f"https://{self.settings['host']}/trends/explore",
        })

    def fetch(self, endpoint: Endpoint) -> str:
        """Send *endpoint* and return the response body as text.

        Args:
            endpoint: Request descriptor built by :mod:`trendwire.endpoints`.

        Returns:
            The raw (still guarded) response body.

        Raises:
            NetworkError: On connection failure, timeout, truncated body
                or a non-2xx status.
        """
        url = endpoint_url(endpoint)
        logger.info("%s %s", endpoint["method"], url)
        try:
            response = self.session.request(
                endpoint["method"],
                url,
                params=endpoint.get("params"),
                data=endpoint.get("data"),
                headers=endpoint.get("headers"),
                timeout=self.settings["timeout"],
            )
        except (ConnectionError, Timeout, ChunkedEncodingError) as exc:
            raise NetworkError(f"Request to {url} failed: {exc}") from exc

        _raise_for_status(response)
        return response.text

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "RequestsTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
