"""API key capability and its settings.

Usage:
    settings = SecuritySettings()
    ApiKey, AllowAnonymous = create_api_key_guard(settings)

    @ApiKey()
    class SampleController:
        def list(self, request): ...

        @AllowAnonymous()
        def health(self, request): ...
"""
from __future__ import annotations

import hmac
from typing import Any, Callable, Mapping

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .guard import Decorator, create_security_guard


class SecuritySettings(BaseSettings):
    """Typed holder for the API key security switches.

    Values come from the environment (or a .env file); the guard is only
    active when it is enabled and a key is configured.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    enabled: bool = Field(default=False, alias="SECURITY_ENABLED")
    header_name: str = Field(default="x-api-key", alias="SECURITY_HEADER_NAME")
    api_key: str | None = Field(default=None, alias="SECURITY_API_KEY")

    @property
    def active(self) -> bool:
        return self.enabled and bool(self.api_key)


def _header(headers: Mapping[str, str], name: str) -> str | None:
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value
    return None


class ApiKeyGuard:
    """Lets a request through when one header carries the expected key."""

    def __init__(self, header_name: str, api_key: str) -> None:
        self._header_name = header_name
        self._api_key = api_key

    def can_activate(self, context: Any) -> bool:
        headers = getattr(context, "headers", None) or {}
        provided = _header(headers, self._header_name)
        if provided is None:
            return False
        return hmac.compare_digest(
            provided.encode("utf-8"), self._api_key.encode("utf-8")
        )


def create_api_key_guard(
    settings: SecuritySettings | None = None,
) -> tuple[Callable[[], Decorator[Any]], Callable[[], Decorator[Any]]]:
    """Return the ``(ApiKey, AllowAnonymous)`` decorators for ``settings``."""
    settings = settings or SecuritySettings()
    return create_security_guard(
        ApiKeyGuard,
        settings.active,
        settings.header_name,
        settings.api_key,
        name="api-key",
    )
