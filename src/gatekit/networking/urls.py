"""URL joining and query-string serialization."""

from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Iterable, Iterator, Mapping, Union
from urllib.parse import quote, urljoin, urlsplit

# Same unreserved set as JavaScript's encodeURIComponent.
_SAFE = "-_.!~*'()"


def _encode(value: str) -> str:
    return quote(value, safe=_SAFE)


class SearchParams:
    """Insertion-ordered, multi-value collection of query/form parameters.

    Duplicate keys are kept, so ``list=1&list=2`` survives serialization.
    Used both as a pre-built query and as a url-encoded form body.
    """

    def __init__(
        self,
        init: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None,
    ) -> None:
        self._pairs: list[tuple[str, str]] = []
        if init is None:
            return
        items = init.items() if isinstance(init, Mapping) else init
        for key, value in items:
            self.append(key, value)

    def append(self, key: str, value: Any) -> None:
        self._pairs.append((str(key), _stringify(value)))

    def copy(self) -> SearchParams:
        clone = SearchParams()
        clone._pairs = list(self._pairs)
        return clone

    def get_all(self, key: str) -> list[str]:
        return [value for name, value in self._pairs if name == key]

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SearchParams):
            return NotImplemented
        return self._pairs == other._pairs

    def __repr__(self) -> str:
        return f"SearchParams({self._pairs!r})"

    def __str__(self) -> str:
        return "&".join(f"{_encode(k)}={_encode(v)}" for k, v in self._pairs)


QueryParams = Union[Mapping[str, Any], SearchParams]


def copy_query(params: QueryParams | None) -> QueryParams | None:
    """Return a private copy so later edits never reach the source."""
    if params is None:
        return None
    if isinstance(params, SearchParams):
        return params.copy()
    return dict(params)


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        # naive values are local time
        moment = value.astimezone(timezone.utc)
        return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


def _flatten(params: Mapping[str, Any], prefix: str) -> list[str]:
    pairs: list[str] = []
    nested: list[str] = []
    for key, value in params.items():
        if _is_empty(value):
            continue
        name = f"{prefix}{key}"
        if isinstance(value, Mapping):
            nested.extend(_flatten(value, f"{name}."))
        elif isinstance(value, (list, tuple)):
            joined = ",".join(_stringify(v) for v in value if not _is_empty(v))
            pairs.append(f"{_encode(name)}={_encode(joined)}")
        else:
            pairs.append(f"{_encode(name)}={_encode(_stringify(value))}")
    return pairs + nested


def build_query(params: QueryParams | None) -> str:
    """Serialize query params, without the leading ``?``.

    ``None`` and empty-string values are dropped; ``0`` and ``False`` are kept.
    Nested mappings flatten to ``parent.child=value`` pairs emitted after the
    parameters of their own level.
    """
    if not params:
        return ""
    if isinstance(params, SearchParams):
        return str(params)
    return "&".join(_flatten(params, ""))


def normalize_base_url(url: str | None) -> str | None:
    if not url:
        return None
    return url if url.endswith("/") else f"{url}/"


def is_absolute(url: str) -> bool:
    parts = urlsplit(url)
    return bool(parts.scheme and parts.netloc)


def build_url(
    base_url: str | None,
    path: str,
    query: QueryParams | None = None,
) -> str:
    """Resolve ``path`` against ``base_url`` and append the query string."""
    path = str(path)
    if is_absolute(path):
        url = path
    else:
        path = path.lstrip("/")
        base = normalize_base_url(base_url)
        url = urljoin(base, path) if base else path

    query_string = build_query(query)
    if not query_string:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query_string}"
