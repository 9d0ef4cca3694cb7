"""Error taxonomy for the Gatekit networking layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .status import status_name

if TYPE_CHECKING:
    from .response import HttpResponse


class GatekitError(Exception):
    """Base class for every error raised by Gatekit."""


class HttpClientError(GatekitError):
    """Base class for failures surfaced by HttpClient."""


class HttpError(HttpClientError):
    """Raised when a call settles with a failing HTTP status.

    Network-level failures are reported with a synthesized Bad Gateway
    response, so callers always get a status, a status name and a response.
    """

    def __init__(self, response: HttpResponse) -> None:
        self.response = response
        self.status = response.status
        self.status_text = status_name(response.status, response.reason)
        self.url = response.url
        super().__init__(
            f"HTTP {self.status_text} error has occurred calling {self.url}"
        )

    def json(self) -> Any:
        return self.response.json()

    def text(self) -> str:
        return self.response.text()


class RequestTimeoutError(HttpClientError):
    """Abort reason used when a call exceeds its timeout.

    A new instance is created per armed timer and the very same instance is
    raised to the caller, so it can be compared by identity.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self.timeout = timeout
        message = "HTTP request timeout"
        if timeout is not None:
            message = f"{message} after {timeout}s"
        super().__init__(message)


class RequestCancelledError(HttpClientError):
    """Default abort reason of a caller-triggered cancellation."""

    def __init__(self, message: str = "HTTP request was cancelled") -> None:
        super().__init__(message)
