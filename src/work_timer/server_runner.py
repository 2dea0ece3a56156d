"""Helpers to run a timer instance with its control API."""

from __future__ import annotations

import logging
import sys
import threading
import time
from pathlib import Path
from typing import Optional

import uvicorn

from .config import TimerSettings
from .dispatcher import Dispatcher
from .errors import ControlServerError
from .paths import get_work_log_path
from .reporting import ConsoleStatusRenderer
from .session_log import SessionLog
from .ticker import Ticker
from .tracker import Tracker
from .webapp import create_app

logger = logging.getLogger(__name__)

STARTUP_TIMEOUT_SECONDS = 5.0


class ControlServer:
    """Serve the control API from a background thread.

    :meth:`start` returns only once uvicorn is listening. uvicorn exits its
    thread when it cannot bind, so a dead thread means the port is taken.
    """

    def __init__(self, server: uvicorn.Server) -> None:
        self._server = server
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._server.run, name="control-api", daemon=True)
        self._thread.start()
        deadline = time.monotonic() + STARTUP_TIMEOUT_SECONDS
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self.stop()
                config = self._server.config
                raise ControlServerError(
                    f"control port {config.host}:{config.port} is in use or could not be opened"
                )
            time.sleep(0.05)
        logger.info(
            "Control API listening on http://%s:%s",
            self._server.config.host,
            self._server.config.port,
        )

    def stop(self) -> None:
        self._server.should_exit = True
        thread, self._thread = self._thread, None
        if thread:
            thread.join(timeout=10)


def run_timer(
    *,
    log_path: Optional[Path] = None,
    settings: Optional[TimerSettings] = None,
    quiet: bool = False,
    log_level: str = "warning",
) -> None:
    """Run a timer until it is asked to shut down.

    Errors loading or writing the work log propagate to the caller.
    """
    settings = settings or TimerSettings()
    session_log = SessionLog.load(log_path or get_work_log_path())
    tracker = Tracker(session_log)

    renderer: Optional[ConsoleStatusRenderer] = None
    if not quiet and sys.stdout.isatty():
        renderer = ConsoleStatusRenderer()
    dispatcher = Dispatcher(tracker, on_tick=renderer)

    app = create_app(dispatcher=dispatcher, tracker=tracker)
    server = ControlServer(
        uvicorn.Server(
            uvicorn.Config(app, host=settings.host, port=settings.port, log_level=log_level)
        )
    )
    ticker = Ticker(dispatcher, settings)

    server.start()
    ticker.start()
    try:
        dispatcher.run_until_shutdown()
    except KeyboardInterrupt:
        logger.info("Interrupted; recording the running session.")
        # The loop has exited, so this thread is the only writer left.
        tracker.stop()
    finally:
        ticker.stop()
        server.stop()
        if renderer is not None:
            renderer.finish()
    logger.info("Work timer stopped.")
