"""
Runtime settings read from the environment.
"""

import os
from dataclasses import dataclass


@dataclass
class Settings:
    log_level: str
    log_format: str
    metrics_enabled: bool
    metrics_port: int
    settle_timeout: float

    @staticmethod
    def from_env() -> "Settings":
        log_level = os.getenv("EFFECT_ENGINE_LOG_LEVEL", "INFO").upper()
        log_format = os.getenv("EFFECT_ENGINE_LOG_FORMAT", "json").lower()
        metrics_enabled = os.getenv("EFFECT_ENGINE_METRICS_ENABLED", "false").lower() == "true"
        metrics_port = int(os.getenv("EFFECT_ENGINE_METRICS_PORT", "8080"))
        settle_timeout = float(os.getenv("EFFECT_ENGINE_SETTLE_TIMEOUT", "5.0"))
        return Settings(
            log_level=log_level,
            log_format=log_format,
            metrics_enabled=metrics_enabled,
            metrics_port=metrics_port,
            settle_timeout=settle_timeout,
        )
