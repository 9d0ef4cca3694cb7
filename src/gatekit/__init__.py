"""Gatekit: HTTP client and security guard decorators."""

from .logging import configure_logging
from .networking import (
    CancelToken,
    HttpClient,
    HttpClientConfig,
    HttpError,
    HttpResponse,
    RequestCancelledError,
    RequestConfig,
    RequestTimeoutError,
    SearchParams,
)
from .security import create_security_guard

__all__ = [
    "CancelToken",
    "HttpClient",
    "HttpClientConfig",
    "HttpError",
    "HttpResponse",
    "RequestCancelledError",
    "RequestConfig",
    "RequestTimeoutError",
    "SearchParams",
    "configure_logging",
    "create_security_guard",
]
