"""
/timer — inspect and drive the Pomodoro timer.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from ...api.schemas import TimerStateOut
from ...timer import PomodoroTimer

router = APIRouter(prefix="/timer", tags=["timer"])


def _get_timer(request: Request) -> PomodoroTimer:
    return request.app.state.timer


def _state(timer: PomodoroTimer) -> TimerStateOut:
    phase = timer.get_state()
    return TimerStateOut(
        phase=phase.value,
        label=phase.label,
        paused=timer.is_paused(),
        elapsed_seconds=timer.get_elapsed(),
        remaining_seconds=timer.get_remaining(),
        duration_seconds=timer.state_duration,
        sessions_completed=timer.sessions_completed,
    )


@router.get("", response_model=TimerStateOut)
def get_timer(timer=Depends(_get_timer)):
    return _state(timer)


@router.post("/start", response_model=TimerStateOut)
def start_timer(timer=Depends(_get_timer)):
    timer.start()
    return _state(timer)


@router.post("/stop", response_model=TimerStateOut)
def stop_timer(timer=Depends(_get_timer)):
    timer.stop()
    return _state(timer)


@router.post("/skip", response_model=TimerStateOut)
def skip_phase(timer=Depends(_get_timer)):
    timer.skip()
    return _state(timer)


@router.post("/pause", response_model=TimerStateOut)
def pause_timer(timer=Depends(_get_timer)):
    timer.pause()
    return _state(timer)


@router.post("/resume", response_model=TimerStateOut)
def resume_timer(timer=Depends(_get_timer)):
    timer.resume()
    return _state(timer)


@router.post("/tick", response_model=TimerStateOut)
def tick_timer(timer=Depends(_get_timer)):
    """Emit an update right away instead of waiting for the tick loop."""
    timer.tick()
    return _state(timer)
