import uuid
from types import SimpleNamespace

import pytest

from gatekit.security.api_key import (
    ApiKeyGuard,
    SecuritySettings,
    create_api_key_guard,
)
from gatekit.security.guard import guards_for, run_guards

HEADER = "ms-api-key"
KEY = str(uuid.uuid4())


@pytest.fixture
def guard():
    return ApiKeyGuard(HEADER, KEY)


def test_valid_api_key_is_accepted(guard):
    assert guard.can_activate(SimpleNamespace(headers={HEADER: KEY})) is True


def test_header_lookup_is_case_insensitive(guard):
    context = SimpleNamespace(headers={"MS-Api-Key": KEY})

    assert guard.can_activate(context) is True


def test_wrong_api_key_is_rejected(guard):
    context = SimpleNamespace(headers={HEADER: "bad_api_key"})

    assert guard.can_activate(context) is False


def test_missing_header_is_rejected(guard):
    assert guard.can_activate(SimpleNamespace(headers={})) is False
    assert guard.can_activate(SimpleNamespace()) is False


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("SECURITY_ENABLED", "true")
    monkeypatch.setenv("SECURITY_HEADER_NAME", HEADER)
    monkeypatch.setenv("SECURITY_API_KEY", KEY)

    settings = SecuritySettings()

    assert settings.enabled is True
    assert settings.header_name == HEADER
    assert settings.api_key == KEY
    assert settings.active is True


def test_settings_inactive_without_key():
    settings = SecuritySettings(enabled=True, api_key=None)

    assert settings.active is False


def test_api_key_decorators_guard_a_controller():
    settings = SecuritySettings(enabled=True, header_name=HEADER, api_key=KEY)
    ApiKey, AllowAnonymous = create_api_key_guard(settings)

    @ApiKey()
    class SampleController:
        def list(self):
            return []

        @AllowAnonymous()
        def health(self):
            return "ok"

    controller = SampleController()
    good = SimpleNamespace(headers={HEADER: KEY})
    bad = SimpleNamespace(headers={HEADER: "nope"})

    assert run_guards(controller.list, good) is True
    assert run_guards(controller.list, bad) is False
    assert run_guards(controller.health, bad) is True


def test_api_key_decorators_are_inert_when_disabled():
    settings = SecuritySettings(enabled=False, header_name=HEADER, api_key=KEY)
    ApiKey, _ = create_api_key_guard(settings)

    @ApiKey()
    class SampleController:
        def list(self):
            return []

    assert guards_for(SampleController.list) == ()
