from __future__ import annotations

import os
from dataclasses import dataclass

from mazeserver.common.constants import DEFAULT_LATENCY_MS, DEFAULT_PORT


def _env_int(value: str | None, default: int | None) -> int | None:
    if value is None or not value.strip():
        return default
    return int(value)


@dataclass(frozen=True)
class Settings:
    """Runtime settings loaded from environment variables.

    Only the network surface is configurable; gameplay tuning lives in
    ``mazeserver.common.constants``.
    """

    host: str = os.getenv("MAZESERVER_HOST", "0.0.0.0")
    port: int = int(os.getenv("MAZESERVER_PORT", str(DEFAULT_PORT)))
    latency_ms: int = int(os.getenv("MAZESERVER_LATENCY_MS", str(DEFAULT_LATENCY_MS)))
    random_seed: int | None = _env_int(os.getenv("MAZESERVER_RANDOM_SEED"), None)
    log_level: str = os.getenv("MAZESERVER_LOG_LEVEL", "INFO").upper()


settings = Settings()
