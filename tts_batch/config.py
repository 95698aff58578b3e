"""
TTS batch client configuration.

Frozen dataclass loaded from environment variables.
Loads ~/.tts_batch/shared.env first (credentials shared across tools),
then ~/.tts_batch/client.env (client-specific overrides).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from tts_batch.models import Endpoint, HealthCheckPolicy

_REQUIRED_FIELDS = (
    "RUNPOD_API_KEY",
    "ENDPOINT_ID",
)

_DEFAULT_BASE_URL = "https://{endpoint_id}.api.runpod.ai"


class ConfigurationError(ValueError):
    """Missing or malformed configuration. Fatal before any network call."""


def load_env_files(config_dir: Path | None = None) -> None:
    """Load shared.env then client.env from the config dir, if present."""
    base_dir = config_dir or Path.home() / ".tts_batch"
    shared_env = base_dir / "shared.env"
    component_env = base_dir / "client.env"
    if shared_env.exists():
        load_dotenv(shared_env)
    if component_env.exists():
        load_dotenv(component_env, override=True)


def _env_int(name: str, default: str) -> int:
    raw = os.environ.get(name, default).strip()
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: str) -> float:
    raw = os.environ.get(name, default).strip()
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from None


@dataclass(frozen=True)
class Config:
    """Immutable TTS batch client configuration."""

    # Endpoint
    api_key: str
    endpoint_id: str
    base_url: str

    # Health gate
    health_max_attempts: int
    health_retry_delay: float
    health_timeout: float

    # Synthesis
    synthesis_timeout: float
    output_dir: str

    def __post_init__(self) -> None:
        if self.synthesis_timeout <= 0:
            raise ConfigurationError(
                f"synthesis_timeout must be > 0, got {self.synthesis_timeout}"
            )

    @classmethod
    def load(cls, config_dir: Path | None = None) -> Config:
        """Load configuration from environment variables.

        Raises ConfigurationError if any required field is missing or empty,
        or if a numeric field does not parse.
        """
        load_env_files(config_dir)

        missing = [
            name for name in _REQUIRED_FIELDS
            if not os.environ.get(name, "").strip()
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}"
            )

        endpoint_id = os.environ["ENDPOINT_ID"].strip()
        base_url = os.environ.get("ENDPOINT_BASE_URL", "").strip()
        if not base_url:
            base_url = _DEFAULT_BASE_URL.format(endpoint_id=endpoint_id)

        return cls(
            api_key=os.environ["RUNPOD_API_KEY"].strip(),
            endpoint_id=endpoint_id,
            base_url=base_url.rstrip("/"),
            health_max_attempts=_env_int("HEALTH_MAX_ATTEMPTS", "10"),
            health_retry_delay=_env_float("HEALTH_RETRY_DELAY", "60"),
            health_timeout=_env_float("HEALTH_TIMEOUT", "30"),
            synthesis_timeout=_env_float("SYNTHESIS_TIMEOUT", "600"),
            output_dir=os.environ.get("OUTPUT_DIR", ".").strip() or ".",
        )

    def endpoint(self) -> Endpoint:
        return Endpoint(
            base_url=self.base_url,
            api_key=self.api_key,
            endpoint_id=self.endpoint_id,
        )

    def health_policy(self) -> HealthCheckPolicy:
        """Build the gate policy. Invalid values surface as ConfigurationError."""
        try:
            return HealthCheckPolicy(
                max_attempts=self.health_max_attempts,
                retry_delay=self.health_retry_delay,
                request_timeout=self.health_timeout,
            )
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
