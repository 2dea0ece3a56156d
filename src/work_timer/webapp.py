"""FastAPI application that lets other processes drive a running timer."""

from __future__ import annotations

import logging
from concurrent.futures import TimeoutError as FutureTimeoutError
from datetime import date, datetime
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict

from .dispatcher import Dispatcher, EventKind
from .errors import DispatcherClosedError, WorkLogError
from .models import TrackerSnapshot
from .timestamps import format_timestamp, local_day, local_now
from .tracker import Tracker

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 10.0


class StatusPayload(BaseModel):
    running: bool
    can_exit: bool
    today_seconds: int
    live_seconds: int
    pause_seconds: Optional[int] = None
    taken_at: datetime
    log_path: str


class ShutdownPayload(BaseModel):
    force: bool = False

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    dispatcher: Dispatcher,
    tracker: Tracker,
) -> FastAPI:
    """Instantiate the control API for one timer instance."""
    app = FastAPI(title="Work Timer", version="0.1.0")

    app.state.dispatcher = dispatcher
    app.state.tracker = tracker

    def _status_payload(snapshot: TrackerSnapshot) -> StatusPayload:
        return StatusPayload(
            running=snapshot.running,
            can_exit=snapshot.can_exit,
            today_seconds=snapshot.today_seconds,
            live_seconds=snapshot.live_seconds,
            pause_seconds=snapshot.pause_seconds,
            taken_at=snapshot.taken_at,
            log_path=str(tracker.session_log.path),
        )

    def _submit(request: Request, kind: EventKind, at: Optional[datetime] = None) -> StatusPayload:
        try:
            snapshot = request.app.state.dispatcher.submit(
                kind, at=at, timeout=REQUEST_TIMEOUT_SECONDS
            )
        except DispatcherClosedError as exc:
            raise HTTPException(status_code=503, detail=str(exc)) from exc
        except FutureTimeoutError as exc:
            raise HTTPException(status_code=504, detail="The timer did not answer in time.") from exc
        except WorkLogError as exc:
            logger.error("Request %s failed: %s", kind.value, exc)
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return _status_payload(snapshot)

    @app.get("/api/health")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/status", response_model=StatusPayload)
    def status(request: Request) -> StatusPayload:
        return _status_payload(request.app.state.tracker.snapshot())

    @app.post("/api/toggle", response_model=StatusPayload)
    def toggle(request: Request) -> StatusPayload:
        return _submit(request, EventKind.TOGGLE_REQUESTED)

    @app.post("/api/start", response_model=StatusPayload)
    def start(request: Request) -> StatusPayload:
        return _submit(request, EventKind.START_REQUESTED)

    @app.post("/api/stop", response_model=StatusPayload)
    def stop(request: Request) -> StatusPayload:
        return _submit(request, EventKind.STOP_REQUESTED)

    @app.post("/api/suspend", response_model=StatusPayload)
    def suspend(request: Request) -> StatusPayload:
        return _submit(request, EventKind.SUSPEND_REQUESTED)

    @app.post("/api/shutdown", response_model=StatusPayload)
    def shutdown(request: Request, payload: Optional[ShutdownPayload] = None) -> StatusPayload:
        force = payload.force if payload else False
        if not force and not request.app.state.tracker.can_exit():
            raise HTTPException(
                status_code=409,
                detail="You're still working; pass force to close anyway.",
            )
        return _submit(request, EventKind.SHUTDOWN_REQUESTED)

    @app.get("/api/intervals")
    def intervals(
        request: Request,
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format. Defaults to today.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        rows = request.app.state.tracker.sessions_on(target_day)
        return {
            "date": target_day.strftime("%Y-%m-%d"),
            "total_seconds": sum(interval.rounded_seconds for interval in rows),
            "intervals": [
                {
                    "start": format_timestamp(interval.start),
                    "end": format_timestamp(interval.end),
                    "seconds": interval.rounded_seconds,
                }
                for interval in rows
            ],
        }

    return app


def _parse_date(value: Optional[str]) -> date:
    if not value:
        return local_day(local_now())
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc
