"""
FastAPI application — local host for the Pomodoro notifier.
Runs on http://127.0.0.1:8766 by default.

The timer, tray and notification service live on app.state so that each
call to create_app() produces a fully independent instance with no shared
module-level globals. This makes test isolation straightforward.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from ..config import config
from ..notifications.service import NotificationService
from ..notifications.tray import MessageTray
from ..signals import IdleQueue
from ..timer import PomodoroTimer

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Background tick loop
# ---------------------------------------------------------------------------

async def _tick_loop(timer: PomodoroTimer, tray: MessageTray, interval_ms: int) -> None:
    while True:
        await asyncio.sleep(interval_ms / 1000.0)
        try:
            timer.tick()
            tray.tick()
        except Exception:
            logger.exception("Timer tick failed")


# ---------------------------------------------------------------------------
# Lifespan — initialises and tears down all per-app state
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    idle = IdleQueue(asyncio.get_running_loop())
    timer = PomodoroTimer()
    tray = MessageTray(transient_timeout_ms=config.transient_timeout_ms)

    app.state.idle = idle
    app.state.timer = timer
    app.state.tray = tray
    app.state.service = NotificationService(timer, tray, idle)

    tick_task = asyncio.create_task(_tick_loop(timer, tray, config.tick_interval_ms))

    yield

    tick_task.cancel()
    try:
        await tick_task
    except asyncio.CancelledError:
        pass

    app.state.service.destroy()
    idle.run_pending()


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

def create_app() -> FastAPI:
    app = FastAPI(
        title="Pomodoro Notifier",
        description="Local host for Pomodoro timer notifications",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:5173", "http://localhost:3000", "null"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from .routers import notifications, timer, tray

    app.include_router(timer.router)
    app.include_router(notifications.router)
    app.include_router(tray.router)

    @app.get("/health")
    def health(request: Request):
        timer = getattr(request.app.state, "timer", None)
        phase = timer.get_state().value if timer is not None else "unknown"
        return {"status": "ok", "version": "0.1.0", "phase": phase}

    return app


app = create_app()
