"""Talk to an already running timer over its control API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import TimerSettings
from .errors import InstanceUnavailableError, WorkLogError

logger = logging.getLogger(__name__)

HEALTH_TIMEOUT_SECONDS = 0.5


class InstanceClient:
    """Forward commands to the timer instance listening on ``base_url``."""

    def __init__(self, base_url: str, timeout: float = 2.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: TimerSettings) -> "InstanceClient":
        return cls(settings.base_url, timeout=settings.request_timeout.total_seconds())

    def is_available(self) -> bool:
        """Return True when a timer answers the health probe.

        Fast timeout to avoid blocking CLI startup.
        """
        try:
            resp = httpx.get(f"{self.base_url}/api/health", timeout=HEALTH_TIMEOUT_SECONDS)
        except httpx.TransportError:
            return False
        return resp.status_code == 200

    def status(self) -> dict[str, Any]:
        return self._request("GET", "/api/status")

    def toggle(self) -> dict[str, Any]:
        return self._request("POST", "/api/toggle")

    def start(self) -> dict[str, Any]:
        return self._request("POST", "/api/start")

    def stop(self) -> dict[str, Any]:
        return self._request("POST", "/api/stop")

    def shutdown(self, force: bool = False) -> dict[str, Any]:
        return self._request("POST", "/api/shutdown", json={"force": force})

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            resp = httpx.request(method, url, timeout=self.timeout, **kwargs)
        except httpx.TransportError as exc:
            raise InstanceUnavailableError(f"no work timer is running at {self.base_url}") from exc
        if resp.status_code >= 400:
            detail = _error_detail(resp)
            logger.debug("%s %s failed with %d: %s", method, url, resp.status_code, detail)
            raise WorkLogError(detail)
        return resp.json()


def _error_detail(resp: httpx.Response) -> str:
    try:
        detail = resp.json().get("detail")
    except ValueError:
        detail = None
    return str(detail or f"request failed with status {resp.status_code}")
