"""Retry settings for read requests to z/OSMF.

Defaults work out of the box and can be overridden through environment
variables. Only GET requests consult these settings.
"""

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class RetryConfig:
    """Retry configuration for idempotent reads."""

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    jitter_enabled: bool = True

    @classmethod
    def from_environment(cls) -> "RetryConfig":
        """Load retry configuration from environment variables.

        Environment variables (all optional):
            ZOSCTL_RETRY_MAX_ATTEMPTS: Max attempts per GET (default: 3, 1 disables retry)
            ZOSCTL_RETRY_INITIAL_DELAY: Initial delay in seconds (default: 1.0)
            ZOSCTL_RETRY_MAX_DELAY: Max delay in seconds (default: 30.0)
            ZOSCTL_RETRY_JITTER_ENABLED: Enable jitter (default: true)
        """
        return cls(
            max_attempts=max(1, int(os.getenv("ZOSCTL_RETRY_MAX_ATTEMPTS", "3"))),
            initial_delay=float(os.getenv("ZOSCTL_RETRY_INITIAL_DELAY", "1.0")),
            max_delay=float(os.getenv("ZOSCTL_RETRY_MAX_DELAY", "30.0")),
            jitter_enabled=os.getenv("ZOSCTL_RETRY_JITTER_ENABLED", "true").lower() == "true",
        )


_config: RetryConfig | None = None


def get_retry_config() -> RetryConfig:
    """Get global retry configuration, loading it from the environment on first access."""
    global _config
    if _config is None:
        _config = RetryConfig.from_environment()
    return _config


def reset_retry_config() -> None:
    """Forces reload from environment on next access."""
    global _config
    _config = None


__all__ = ["RetryConfig", "get_retry_config", "reset_retry_config"]
