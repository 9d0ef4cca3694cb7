from .api_key import ApiKeyGuard, SecuritySettings, create_api_key_guard
from .guard import (
    GuardBinding,
    create_security_guard,
    guards_for,
    run_guards,
    security_schemes_for,
)

__all__ = [
    "ApiKeyGuard",
    "GuardBinding",
    "SecuritySettings",
    "create_api_key_guard",
    "create_security_guard",
    "guards_for",
    "run_guards",
    "security_schemes_for",
]
