"""Synchronous HTTP client for the Gatekit networking layer.

Every call merges the client defaults with the call options, resolves the
URL against the client base URL, optionally arms a timeout and then hands
the request to ``requests``. Failures surface as typed errors; nothing is
retried.
"""

from __future__ import annotations

import base64
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import replace
from http import HTTPStatus
from typing import Any, Mapping

import requests
import structlog

from .body import serialize_body
from .cancel import CancelToken, Deadline
from .config import (
    HttpClientConfig,
    RequestConfig,
    RequestInterceptor,
    merge_config,
    update_config,
)
from .errors import HttpError, RequestTimeoutError
from .response import HttpResponse
from .status import HttpMethod
from .urls import QueryParams, build_url

logger = structlog.get_logger(__name__)


def _discard(future: Future[HttpResponse]) -> None:
    """Close a response that arrived after its call was abandoned."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


def _serialize_data(config: RequestConfig | None) -> RequestConfig | None:
    """Turn the call ``data`` payload into its body and content-type."""
    if config is None or config.data is None:
        return config
    body, headers = serialize_body(config.data, config.headers)
    if body is None:
        return config
    return replace(config, body=body, headers=headers)


def _method_name(method: HttpMethod | str | None) -> str:
    if isinstance(method, HttpMethod):
        return method.value
    return (method or HttpMethod.GET.value).upper()


class HttpClient:
    """HTTP client with base URL, default options and typed failures.

    The base URL is fixed at construction. The base request config is
    mutable between calls through ``config``, ``replace_config`` and
    ``set_header``; each call reads it once, when it starts.
    """

    def __init__(
        self, config: HttpClientConfig | None = None, **kwargs: Any
    ) -> None:
        """Create a new HttpClient.

        Args:
            config: Base URL, default headers/query/timeout and error policy.
            **kwargs: Alternative to ``config``; unknown keys become
                transport options passed verbatim to ``requests``.
        """
        if config is None:
            config = HttpClientConfig.from_kwargs(**kwargs)
        elif kwargs:
            raise TypeError("pass either a HttpClientConfig or keywords")
        self._base_url = config.url
        self._throw_on_client_error = config.throw_on_client_error
        self._config = config.request_defaults()
        self._session = requests.Session()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    @property
    def base_url(self) -> str | None:
        return self._base_url

    @property
    def throw_on_client_error(self) -> bool:
        return self._throw_on_client_error

    @property
    def config(self) -> RequestConfig:
        """Base request config applied under every call."""
        return self._config

    @config.setter
    def config(self, changes: Mapping[str, Any]) -> None:
        self._config = update_config(self._config, **changes)

    def replace_config(self, config: RequestConfig) -> None:
        self._config = config

    def set_header(self, key: str, value: str) -> None:
        self._config.headers[key] = value

    def _pool(self) -> ThreadPoolExecutor:
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    thread_name_prefix="gatekit-http"
                )
            return self._executor

    def close(self) -> None:
        """Release the underlying session and worker threads."""
        self._session.close()
        with self._executor_lock:
            if self._executor is not None:
                self._executor.shutdown(wait=False, cancel_futures=True)
                self._executor = None

    def __enter__(self) -> HttpClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _send(
        self, method: str, url: str, config: RequestConfig
    ) -> HttpResponse:
        """Perform the transport call and normalise transport failures."""
        logger.debug("http.request.dispatch", method=method, url=url)
        try:
            raw = self._session.request(
                method,
                url,
                headers=config.headers or None,
                data=config.body,
                timeout=config.timeout,
                **config.options,
            )
        except requests.exceptions.Timeout as exc:
            logger.warning(
                "http.request.timeout", method=method, url=url,
                timeout_s=config.timeout,
            )
            raise RequestTimeoutError(config.timeout) from exc
        except requests.exceptions.RequestException as exc:
            logger.warning(
                "http.request.transport_error", method=method, url=url,
                error=type(exc).__name__,
            )
            raise HttpError(
                HttpResponse.synthesize(
                    HTTPStatus.BAD_GATEWAY.value, url, str(exc)
                )
            ) from exc
        return HttpResponse(raw)

    def _send_cancellable(
        self,
        method: str,
        url: str,
        config: RequestConfig,
        token: CancelToken,
        deadline: Deadline,
    ) -> HttpResponse:
        """Race the transport call against the token.

        The first of {response, cancel} wins. A finished transport call
        disarms ``deadline`` before waking the caller. A response that
        arrives after the call was abandoned is closed and dropped.
        """
        token.raise_if_cancelled()

        settled = threading.Event()

        def on_done(_: Future[HttpResponse]) -> None:
            deadline.clear()
            settled.set()

        future = self._pool().submit(self._send, method, url, config)
        future.add_done_callback(on_done)
        unsubscribe = token.subscribe(settled.set)
        try:
            settled.wait()
        finally:
            unsubscribe()

        if future.done():
            return future.result()

        if not future.cancel():
            future.add_done_callback(_discard)
        if token.timed_out:
            logger.warning(
                "http.request.timeout", method=method, url=url,
                timeout_s=config.timeout,
            )
        else:
            logger.info("http.request.cancelled", method=method, url=url)
        raise token.reason

    def request(
        self, url: str, config: RequestConfig | None = None
    ) -> HttpResponse:
        """Perform a request.

        Args:
            url: Path relative to the base URL, or an absolute URL.
            config: Call options, merged over the client defaults. A
                ``data`` payload is serialized into the body first.

        Returns:
            The response, even for failing statuses when
            ``throw_on_client_error`` is disabled.

        Raises:
            HttpError: Failing status (with throwing enabled), or a
                transport failure reported as Bad Gateway.
            RequestTimeoutError: The timeout elapsed first.
            RequestCancelledError: The token was cancelled first; a custom
                cancel reason is raised as is.
        """
        merged = merge_config(self._config, _serialize_data(config))
        target = str(url)
        if merged.on_request is not None:
            merged.on_request(merged, target)

        method = _method_name(merged.method)
        full_url = build_url(self._base_url, target, merged.query)

        token = merged.cancel
        if token is None and merged.timeout:
            token = CancelToken()

        if token is None:
            response = self._send(method, full_url, merged)
        else:
            with Deadline(token, merged.timeout) as deadline:
                response = self._send_cancellable(
                    method, full_url, merged, token, deadline
                )

        if self._throw_on_client_error and not response.ok:
            logger.info(
                "http.request.client_error", method=method,
                url=response.url, status=response.status,
            )
            raise HttpError(response)
        return response

    def _call(
        self,
        method: HttpMethod,
        url: str,
        *,
        headers: Mapping[str, str] | None,
        query: QueryParams | None,
        body: Any,
        timeout: float | None,
        cancel: CancelToken | None,
        on_request: RequestInterceptor | None,
        options: dict[str, Any],
        data: Any = None,
    ) -> HttpResponse:
        return self.request(
            url,
            RequestConfig(
                method=method,
                headers=dict(headers or {}),
                query=query,
                body=body,
                data=data,
                timeout=timeout,
                cancel=cancel,
                on_request=on_request,
                options=options,
            ),
        )

    def get(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        body: Any = None,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
        on_request: RequestInterceptor | None = None,
        **options: Any,
    ) -> HttpResponse:
        """Perform an HTTP GET request.

        Args:
            url: Path relative to the base URL, or an absolute URL.
            headers: Per-request headers merged over the defaults.
            query: Query params merged over the default query.
            body: Raw body, sent as is.
            timeout: Timeout in seconds for this request.
            cancel: Token the caller may cancel to abort the request.
            on_request: Interceptor replacing the default one.
            **options: Transport options passed verbatim to ``requests``.
        """
        return self._call(
            HttpMethod.GET, url, headers=headers, query=query, body=body,
            timeout=timeout, cancel=cancel, on_request=on_request,
            options=options,
        )

    def delete(
        self,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        body: Any = None,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
        on_request: RequestInterceptor | None = None,
        **options: Any,
    ) -> HttpResponse:
        """Perform an HTTP DELETE request. Same arguments as ``get``."""
        return self._call(
            HttpMethod.DELETE, url, headers=headers, query=query, body=body,
            timeout=timeout, cancel=cancel, on_request=on_request,
            options=options,
        )

    def post(
        self,
        url: str,
        *,
        data: Any = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
        on_request: RequestInterceptor | None = None,
        **options: Any,
    ) -> HttpResponse:
        """Perform an HTTP POST request.

        Args:
            url: Path relative to the base URL, or an absolute URL.
            data: Structured payload; a ``SearchParams`` is sent url-encoded,
                mappings and lists are sent as JSON. Takes precedence over
                ``body``.
            body: Raw body, used when ``data`` is not given.
            headers: Per-request headers; an explicit content-type wins.
            query: Query params merged over the default query.
            timeout: Timeout in seconds for this request.
            cancel: Token the caller may cancel to abort the request.
            on_request: Interceptor replacing the default one.
            **options: Transport options passed verbatim to ``requests``.
        """
        return self._call(
            HttpMethod.POST, url, data=data, body=body, headers=headers,
            query=query, timeout=timeout, cancel=cancel,
            on_request=on_request, options=options,
        )

    def put(
        self,
        url: str,
        *,
        data: Any = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
        on_request: RequestInterceptor | None = None,
        **options: Any,
    ) -> HttpResponse:
        """Perform an HTTP PUT request. Same arguments as ``post``."""
        return self._call(
            HttpMethod.PUT, url, data=data, body=body, headers=headers,
            query=query, timeout=timeout, cancel=cancel,
            on_request=on_request, options=options,
        )

    def patch(
        self,
        url: str,
        *,
        data: Any = None,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
        query: QueryParams | None = None,
        timeout: float | None = None,
        cancel: CancelToken | None = None,
        on_request: RequestInterceptor | None = None,
        **options: Any,
    ) -> HttpResponse:
        """Perform an HTTP PATCH request. Same arguments as ``post``."""
        return self._call(
            HttpMethod.PATCH, url, data=data, body=body, headers=headers,
            query=query, timeout=timeout, cancel=cancel,
            on_request=on_request, options=options,
        )

    @staticmethod
    def basic_auth(user: str, password: str) -> str:
        """Encode ``user:password`` as unpadded base64url."""
        raw = f"{user}:{password}".encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")
