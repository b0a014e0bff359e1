from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .errors import ConfigError

BINARY_RESPONSE_MODES = ("auto", "never", "always")


@dataclass(frozen=True)
class Settings:
    payload_version: str = "2.0"
    binary_responses: str = "auto"
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls) -> "Settings":
        settings = cls(
            payload_version=os.getenv("APIGW_PAYLOAD_VERSION") or "2.0",
            binary_responses=(os.getenv("APIGW_BINARY_RESPONSES") or "auto").strip().lower(),
            log_level=(os.getenv("APIGW_LOG_LEVEL") or "WARNING").strip().upper(),
        )
        if settings.binary_responses not in BINARY_RESPONSE_MODES:
            raise ConfigError(
                f"APIGW_BINARY_RESPONSES must be one of {', '.join(BINARY_RESPONSE_MODES)}, "
                f'got "{settings.binary_responses}"'
            )
        # getLevelName maps known names to their numeric level
        if not isinstance(logging.getLevelName(settings.log_level), int):
            raise ConfigError(f'APIGW_LOG_LEVEL is not a logging level: "{settings.log_level}"')
        return settings
