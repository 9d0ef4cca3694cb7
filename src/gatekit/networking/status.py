"""HTTP methods and status helpers."""

from __future__ import annotations

from enum import Enum
from http import HTTPStatus


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


def status_name(status: int, fallback: str | None = None) -> str:
    """Return the symbolic name of a status code, e.g. ``BAD_GATEWAY``."""
    try:
        return HTTPStatus(status).name
    except ValueError:
        return fallback or str(status)


def is_success(status: int) -> bool:
    """True for the 2xx and 3xx ranges."""
    return 200 <= status < 400
