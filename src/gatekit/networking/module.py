"""Registration of HttpClient instances with a dependency-injection container.

The container itself lives outside Gatekit; it receives a
``ProviderDescriptor`` binding one token to one ready-built client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Hashable

from .client import HttpClient
from .config import HttpClientConfig


@dataclass(frozen=True)
class ProviderDescriptor:
    """A value provider: ``provide`` resolves to ``use_value``."""

    provide: Hashable
    use_value: Any
    exports: tuple[Hashable, ...] = field(default=())
    is_global: bool = False


def register_http_client(
    *,
    url: str | None = None,
    token: Hashable | None = None,
    is_global: bool = False,
    **config: Any,
) -> ProviderDescriptor:
    """Build one HttpClient and bind it to ``token``.

    The default token is the ``HttpClient`` class, so a container can
    resolve the client by type; pass a custom token to register several
    differently configured clients side by side.
    """
    provide = token if token is not None else HttpClient
    client = HttpClient(HttpClientConfig.from_kwargs(url=url, **config))
    return ProviderDescriptor(
        provide=provide,
        use_value=client,
        exports=(provide,),
        is_global=is_global,
    )
