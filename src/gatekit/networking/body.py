"""Request body serialization."""

from __future__ import annotations

import json
from typing import Any, Mapping

from .urls import SearchParams

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded;charset=utf-8"
JSON_CONTENT_TYPE = "application/json;charset=utf-8"


def _with_content_type(
    content_type: str, headers: dict[str, str]
) -> dict[str, str]:
    # Header names are compared case-insensitively; explicit ones win.
    if any(name.lower() == "content-type" for name in headers):
        return headers
    return {"content-type": content_type, **headers}


def serialize_body(
    data: Any, headers: Mapping[str, str] | None = None
) -> tuple[str | None, dict[str, str]]:
    """Turn a structured ``data`` payload into a wire body plus headers.

    Returns ``(body, headers)``. ``body`` is ``None`` when ``data`` is neither
    a form collection nor a JSON structure, and headers are then untouched.
    """
    explicit = dict(headers or {})
    if isinstance(data, SearchParams):
        return str(data), _with_content_type(FORM_CONTENT_TYPE, explicit)
    if isinstance(data, (Mapping, list, tuple)):
        body = json.dumps(data, separators=(",", ":"), default=str)
        return body, _with_content_type(JSON_CONTENT_TYPE, explicit)
    return None, explicit
