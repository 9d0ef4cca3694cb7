"""Response wrapper returned by HttpClient."""

from __future__ import annotations

import json
from typing import Any, Mapping

import requests

from .status import is_success, status_name


class HttpResponse:
    """Thin wrapper over ``requests.Response``.

    ``ok`` is true for 2xx and 3xx statuses.
    """

    def __init__(self, raw: requests.Response) -> None:
        self.raw = raw

    @classmethod
    def synthesize(
        cls, status: int, url: str, body: Any = None
    ) -> HttpResponse:
        """Build a response that never came from the network.

        ``body`` is JSON-encoded so ``json()`` returns it back.
        """
        raw = requests.Response()
        raw.status_code = status
        raw.url = url
        raw.reason = status_name(status).replace("_", " ").title()
        raw.headers["content-type"] = "application/json"
        raw._content = json.dumps(body).encode("utf-8")
        raw.encoding = "utf-8"
        return cls(raw)

    @property
    def status(self) -> int:
        return self.raw.status_code

    @property
    def ok(self) -> bool:
        return is_success(self.raw.status_code)

    @property
    def url(self) -> str:
        return self.raw.url

    @property
    def reason(self) -> str | None:
        return self.raw.reason

    @property
    def headers(self) -> Mapping[str, str]:
        return self.raw.headers

    @property
    def content(self) -> bytes:
        return self.raw.content

    def json(self) -> Any:
        return self.raw.json()

    def text(self) -> str:
        return self.raw.text

    def close(self) -> None:
        self.raw.close()

    def __repr__(self) -> str:
        return f"<HttpResponse [{self.status}] {self.url}>"
