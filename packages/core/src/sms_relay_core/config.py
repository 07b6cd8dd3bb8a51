"""RelaySettings — environment-driven configuration (``SMS_RELAY_*``)."""

from __future__ import annotations

from functools import lru_cache
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .primitives.retry import RetryPolicy


class RelaySettings(BaseSettings):
    """Settings for the message pipeline.

    Per-endpoint credentials and feature toggles are produced by the mobile
    settings screen; the pipeline only carries them as opaque inputs.
    """

    model_config = SettingsConfigDict(
        env_prefix="SMS_RELAY_",
        env_file=".env",
        extra="ignore",
    )

    event_source: str = Field(
        default="/v1/messages/send",
        description="CloudEvents source used when the caller does not supply one",
    )

    read_back_timeout: float = Field(
        default=5.0,
        gt=0,
        description="Upper bound in seconds for reading a message back after publish",
    )
    read_back_max_attempts: int = Field(default=10, ge=1)
    read_back_base_delay: float = Field(default=0.05, ge=0)
    read_back_max_delay: float = Field(default=1.0, ge=0)

    log_level: str = "INFO"
    log_json: bool = False

    incoming_call_events_enabled: bool = False
    encrypt_received_content: bool = False

    @model_validator(mode="after")
    def _check_delays(self) -> RelaySettings:
        if self.read_back_base_delay > self.read_back_max_delay:
            raise ValueError("read_back_base_delay must be <= read_back_max_delay")
        return self

    def read_back_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.read_back_max_attempts,
            base_delay=self.read_back_base_delay,
            max_delay=self.read_back_max_delay,
            deadline=self.read_back_timeout,
        )


@lru_cache
def get_settings() -> RelaySettings:
    return RelaySettings()
