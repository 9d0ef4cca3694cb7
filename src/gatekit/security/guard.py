"""Security guard decorator factory.

``create_security_guard`` turns a capability (any class with a
``can_activate(context) -> bool`` method) into a pair of decorators:

- ``Secure()`` attaches the capability check and its security scheme name to
  a single method, or to every own method of a class;
- ``Allow()`` exempts one method from a class-level ``Secure()``.

Method decorators run while the class body executes, before any class
decorator. Two per-guard signals make both passes commute: ``locked`` marks
a method already secured on its own, ``allowed`` marks an exempt one. The
class-level pass skips both.

The checks are not enforced here; the routing layer reads them with
``guards_for`` and evaluates them with ``run_guards`` before the handler.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

import structlog

from .metadata import metadata

logger = structlog.get_logger(__name__)

T = TypeVar("T")

GUARDS_KEY = "gatekit:guards"
SECURITY_KEY = "gatekit:security"

Decorator = Callable[[T], T]
Injector = Callable[[type], Any]


@runtime_checkable
class Capability(Protocol):
    def can_activate(self, context: Any) -> bool: ...


class _Signal:
    """Unique, identity-compared metadata key."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"<signal {self.name}>"


@dataclass(frozen=True)
class GuardBinding:
    """A capability attached to a handler.

    ``capability`` is either a shared instance, built once by the factory,
    or a class left to the injector to build per request.
    """

    capability: Any
    name: str

    @property
    def shared(self) -> bool:
        return not inspect.isclass(self.capability)

    def resolve(self, injector: Injector | None = None) -> Capability:
        if self.shared:
            return self.capability
        if injector is not None:
            return injector(self.capability)
        return self.capability()


def _target_function(handler: Callable[..., Any]) -> Callable[..., Any]:
    return getattr(handler, "__func__", handler)


def guards_for(handler: Callable[..., Any]) -> tuple[GuardBinding, ...]:
    """Capability checks attached to a handler, in registration order."""
    return metadata.get(_target_function(handler), GUARDS_KEY, ())


def security_schemes_for(handler: Callable[..., Any]) -> tuple[str, ...]:
    """Security scheme names attached to a handler."""
    return metadata.get(_target_function(handler), SECURITY_KEY, ())


def run_guards(
    handler: Callable[..., Any],
    context: Any,
    injector: Injector | None = None,
) -> bool:
    """Evaluate every capability attached to ``handler`` against ``context``.

    Stops at the first failing check. Raw capability classes are built per
    call through ``injector`` (or called with no arguments).
    """
    for binding in guards_for(handler):
        capability = binding.resolve(injector)
        if not capability.can_activate(context):
            logger.info(
                "security.guard.denied",
                guard=binding.name,
                handler=getattr(handler, "__qualname__", repr(handler)),
            )
            return False
    return True


def _is_constructor_or_dunder(name: str) -> bool:
    return name.startswith("__") and name.endswith("__")


def _create_secure_decorator(
    binding: GuardBinding, locked: _Signal, allowed: _Signal
) -> Callable[[], Decorator[Any]]:
    def apply(fn: Callable[..., Any]) -> None:
        metadata.append(fn, GUARDS_KEY, binding)
        metadata.append(fn, SECURITY_KEY, binding.name)
        logger.debug(
            "security.guard.applied",
            guard=binding.name,
            handler=getattr(fn, "__qualname__", repr(fn)),
        )

    def secure() -> Decorator[Any]:
        def decorate(target: Any) -> Any:
            # method decoration; staticmethod and classmethod wrappers are
            # recorded on the function they hold
            if not inspect.isclass(target):
                fn = _target_function(target)
                if metadata.accepts(fn):
                    metadata.define(fn, locked, True)
                    apply(fn)
                return target

            # class decoration
            for key, member in list(vars(target).items()):
                if _is_constructor_or_dunder(key):
                    continue
                if not inspect.isfunction(member):
                    continue
                if metadata.has(member, allowed) or metadata.has(member, locked):
                    continue
                apply(member)
            return target

        return decorate

    return secure


def _create_allow_decorator(allowed: _Signal) -> Callable[[], Decorator[Any]]:
    def allow() -> Decorator[Any]:
        def decorate(target: Any) -> Any:
            fn = _target_function(target)
            if (
                callable(fn)
                and not inspect.isclass(fn)
                and metadata.accepts(fn)
            ):
                metadata.define(fn, allowed, True)
            return target

        return decorate

    return allow


def _disabled() -> Decorator[Any]:
    return lambda target: target


def create_security_guard(
    capability: type,
    enabled: bool = True,
    *args: Any,
    name: str | None = None,
) -> tuple[Callable[[], Decorator[Any]], Callable[[], Decorator[Any]]]:
    """Generate the ``(Secure, Allow)`` decorator pair for a capability.

    Args:
        capability: Class exposing ``can_activate(context) -> bool``.
        enabled: When False both decorators leave their targets untouched.
        *args: Constructor arguments. When given, one instance is built now
            and shared by every secured handler; otherwise the class itself
            is handed to the injector at dispatch time.
        name: Security scheme name; defaults to the capability class name.

    Example:
        ApiKey, AllowAnonymous = create_security_guard(
            ApiKeyGuard, settings.active, "x-api-key", settings.api_key
        )

        @ApiKey()
        class ReportsController:
            def export(self, request): ...

            @AllowAnonymous()
            def health(self, request): ...
    """
    if not enabled:
        return _disabled, _disabled

    scheme = name or capability.__name__
    locked = _Signal(f"{scheme}:locked")
    allowed = _Signal(f"{scheme}:allowed")
    binding = GuardBinding(
        capability=capability(*args) if args else capability,
        name=scheme,
    )

    secure = _create_secure_decorator(binding, locked, allowed)
    allow = _create_allow_decorator(allowed)
    return secure, allow
