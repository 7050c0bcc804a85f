"""
Engine-wide constants and runtime settings.

Settings are plain values with environment overrides; nothing here reads
files or talks to external services.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

# User-facing text for any failure inside a solver; details go to the log only.
GENERIC_FAILURE_MESSAGE = "An error occurred during optimization"

DEFAULT_PAGE_SIZE = 20
DEFAULT_POLL_INTERVAL = 0.25  # seconds
DEFAULT_LOG_LEVEL = "INFO"
THREAD_NAME_PREFIX = "tsp-run"

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

ENV_LOG_LEVEL = "HEURISTIC_TSP_LOG_LEVEL"
ENV_POLL_INTERVAL = "HEURISTIC_TSP_POLL_INTERVAL"
ENV_SHUTDOWN_HOOK = "HEURISTIC_TSP_SHUTDOWN_HOOK"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineSettings:
    log_level: str = DEFAULT_LOG_LEVEL
    register_shutdown_hook: bool = True
    thread_name_prefix: str = THREAD_NAME_PREFIX
    poll_interval: float = DEFAULT_POLL_INTERVAL

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "EngineSettings":
        env = os.environ if environ is None else environ
        hook = env.get(ENV_SHUTDOWN_HOOK)
        return cls(
            log_level=env.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL).upper(),
            register_shutdown_hook=True if hook is None else hook.strip().lower() in _TRUTHY,
            poll_interval=float(env.get(ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL)),
        )


def configure_logging(level: str | int = DEFAULT_LOG_LEVEL) -> None:
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "DEFAULT_POLL_INTERVAL",
    "EngineSettings",
    "GENERIC_FAILURE_MESSAGE",
    "configure_logging",
]
