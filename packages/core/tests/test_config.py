from __future__ import annotations

import pytest
from pydantic import ValidationError

from sms_relay_core.config import RelaySettings, get_settings


def test_defaults() -> None:
    settings = RelaySettings()

    assert settings.event_source == "/v1/messages/send"
    assert settings.read_back_timeout == 5.0
    assert settings.incoming_call_events_enabled is False
    assert settings.encrypt_received_content is False
    assert not hasattr(settings, "environment")


def test_reads_prefixed_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SMS_RELAY_READ_BACK_TIMEOUT", "2.5")
    monkeypatch.setenv("SMS_RELAY_EVENT_SOURCE", "/v2/messages/send")
    monkeypatch.setenv("SMS_RELAY_LOG_JSON", "true")

    settings = RelaySettings()

    assert settings.read_back_timeout == 2.5
    assert settings.event_source == "/v2/messages/send"
    assert settings.log_json is True


def test_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValidationError):
        RelaySettings(read_back_timeout=0)


def test_rejects_inverted_delays() -> None:
    with pytest.raises(ValidationError, match="read_back_base_delay"):
        RelaySettings(read_back_base_delay=2.0, read_back_max_delay=1.0)


def test_read_back_policy_mirrors_settings() -> None:
    settings = RelaySettings(
        read_back_max_attempts=3,
        read_back_base_delay=0.1,
        read_back_max_delay=0.4,
        read_back_timeout=2.0,
    )

    policy = settings.read_back_policy()

    assert policy.max_attempts == 3
    assert policy.base_delay == 0.1
    assert policy.max_delay == 0.4
    assert policy.deadline == 2.0


def test_get_settings_is_cached() -> None:
    get_settings.cache_clear()
    try:
        assert get_settings() is get_settings()
    finally:
        get_settings.cache_clear()
