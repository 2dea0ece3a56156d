"""Configuration models and helpers for the work timer."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 47613


@dataclass(slots=True)
class TimerSettings:
    """Runtime configuration for a timer instance and its control API."""

    tick_interval: timedelta = timedelta(seconds=1)
    sleep_gap: timedelta = timedelta(seconds=30)
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    request_timeout: timedelta = timedelta(seconds=2)

    @classmethod
    def from_options(
        cls,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        tick_seconds: float = 1.0,
        sleep_gap_seconds: float | None = None,
        timeout_seconds: float = 2.0,
    ) -> "TimerSettings":
        sleep_gap = (
            sleep_gap_seconds if sleep_gap_seconds is not None else max(tick_seconds * 30, 30.0)
        )
        return cls(
            tick_interval=timedelta(seconds=tick_seconds),
            sleep_gap=timedelta(seconds=sleep_gap),
            host=host,
            port=port,
            request_timeout=timedelta(seconds=timeout_seconds),
        )

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"
