"""Configuration models for the HttpClient interface."""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Mapping

from .cancel import CancelToken
from .urls import QueryParams, SearchParams, copy_query, normalize_base_url

if TYPE_CHECKING:
    from .status import HttpMethod

RequestInterceptor = Callable[["RequestConfig", str], None]


def _empty_mapping() -> Mapping[str, Any]:
    """Return an immutable empty mapping."""

    return MappingProxyType({})


def _check_timeout(timeout: float | None) -> None:
    if timeout is not None and timeout <= 0:
        raise ValueError("timeout must be > 0 when provided")


@dataclass
class RequestConfig:
    """Options of a single outbound call.

    ``options`` is handed verbatim to ``requests`` (``verify``,
    ``allow_redirects``, ``proxies``, ``cert``...).
    """

    method: HttpMethod | str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    query: QueryParams | None = None
    body: Any = None
    data: Any = None
    timeout: float | None = None
    cancel: CancelToken | None = None
    on_request: RequestInterceptor | None = None
    options: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        _check_timeout(self.timeout)


def _merge_query(
    base: QueryParams | None, override: QueryParams | None
) -> QueryParams | None:
    if override is None:
        return copy_query(base)
    if base is None or isinstance(base, SearchParams) or isinstance(
        override, SearchParams
    ):
        return copy_query(override)
    return {**base, **override}


def merge_config(
    base: RequestConfig, override: RequestConfig | None = None
) -> RequestConfig:
    """Merge call options over client defaults into a new RequestConfig.

    Scalar fields take the call value when it is not None. ``headers``,
    ``query`` and ``options`` are shallow-merged with call keys winning,
    except that a pre-built ``SearchParams`` query replaces the other side.
    """
    if override is None:
        override = RequestConfig()
    merged = {
        f.name: (
            getattr(override, f.name)
            if getattr(override, f.name) is not None
            else getattr(base, f.name)
        )
        for f in fields(RequestConfig)
    }
    merged["headers"] = {**base.headers, **override.headers}
    merged["query"] = _merge_query(base.query, override.query)
    merged["options"] = {**base.options, **override.options}
    return RequestConfig(**merged)


@dataclass(frozen=True)
class HttpClientConfig:
    """Construction-time configuration for HttpClient.

    ``url`` is the base every relative path resolves against; it is always
    stored with a trailing slash.
    """

    url: str | None = None
    headers: Mapping[str, str] = field(default_factory=_empty_mapping)
    query: QueryParams | None = None
    timeout: float | None = None
    cancel: CancelToken | None = None
    on_request: RequestInterceptor | None = None
    throw_on_client_error: bool = True
    options: Mapping[str, Any] = field(default_factory=_empty_mapping)

    def __post_init__(self) -> None:
        _check_timeout(self.timeout)

        object.__setattr__(self, "url", normalize_base_url(self.url))
        # Freeze copied mappings to avoid post-init mutation side effects.
        object.__setattr__(
            self, "headers", MappingProxyType(dict(self.headers))
        )
        object.__setattr__(
            self, "options", MappingProxyType(dict(self.options))
        )
        query = copy_query(self.query)
        if query is not None and not isinstance(query, SearchParams):
            query = MappingProxyType(query)
        object.__setattr__(self, "query", query)

    @classmethod
    def from_kwargs(cls, **kwargs: Any) -> HttpClientConfig:
        """Build a config, routing unknown keys into transport ``options``."""
        known = {f.name for f in fields(cls)}
        options = dict(kwargs.pop("options", None) or {})
        for key in list(kwargs):
            if key not in known:
                options[key] = kwargs.pop(key)
        return cls(options=options, **kwargs)

    def request_defaults(self) -> RequestConfig:
        """Return a fresh, mutable base RequestConfig for the client."""
        return RequestConfig(
            headers=dict(self.headers),
            query=copy_query(self.query),
            timeout=self.timeout,
            cancel=self.cancel,
            on_request=self.on_request,
            options=dict(self.options),
        )


def update_config(config: RequestConfig, **changes: Any) -> RequestConfig:
    """Shallow-merge ``changes`` into ``config``; whole fields are replaced."""
    return replace(config, **changes)
