from typing import Iterator

import pytest
from bookit.config import get_settings


@pytest.fixture
def fresh_settings() -> Iterator[None]:
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch, fresh_settings: None) -> None:
    monkeypatch.setenv("HOST", "0.0.0.0")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("REFERENCE_MAX_ATTEMPTS", "3")

    settings = get_settings()

    assert settings.host == "0.0.0.0"
    assert settings.port == 8080
    assert settings.log_level == "DEBUG"
    assert settings.reference_max_attempts == 3


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch, fresh_settings: None) -> None:
    for name in ("HOST", "PORT", "BOOKING_TIMEOUT_SECONDS", "REFERENCE_MAX_ATTEMPTS"):
        monkeypatch.delenv(name, raising=False)

    settings = get_settings()

    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.booking_timeout_seconds == 10.0
    assert settings.reference_max_attempts == 5
