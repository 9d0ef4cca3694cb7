from .cancel import CancelToken
from .client import HttpClient
from .config import HttpClientConfig, RequestConfig
from .errors import (
    GatekitError,
    HttpClientError,
    HttpError,
    RequestCancelledError,
    RequestTimeoutError,
)
from .module import ProviderDescriptor, register_http_client
from .response import HttpResponse
from .status import HttpMethod
from .urls import SearchParams

__all__ = [
    "CancelToken",
    "GatekitError",
    "HttpClient",
    "HttpClientConfig",
    "HttpClientError",
    "HttpError",
    "HttpMethod",
    "HttpResponse",
    "ProviderDescriptor",
    "RequestCancelledError",
    "RequestConfig",
    "RequestTimeoutError",
    "SearchParams",
    "register_http_client",
]
