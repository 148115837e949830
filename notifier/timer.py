"""
Pomodoro Timer — the event source notifications follow.

Emits "state-changed" on every phase transition and "update" on every tick.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Callable, Optional

from .config import config
from .signals import EventEmitter


class TimerPhase(str, Enum):
    WORK = "work"
    SHORT_BREAK = "short_break"
    LONG_BREAK = "long_break"
    IDLE = "idle"

    @property
    def label(self) -> str:
        return _LABELS[self]

    @property
    def is_break(self) -> bool:
        return self in (TimerPhase.SHORT_BREAK, TimerPhase.LONG_BREAK)


_LABELS = {
    TimerPhase.WORK: "Pomodoro",
    TimerPhase.SHORT_BREAK: "Short Break",
    TimerPhase.LONG_BREAK: "Long Break",
    TimerPhase.IDLE: "",
}


class PomodoroTimer(EventEmitter):
    """
    Usage:
        timer = PomodoroTimer()
        timer.connect("state-changed", on_state_changed)
        timer.start()
        timer.tick()    # call once a second
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        super().__init__()
        self._clock = clock
        self._state = TimerPhase.IDLE
        self._started_at: Optional[float] = None
        self._paused_at: Optional[float] = None
        self.state_duration: float = 0.0
        self.sessions_completed = 0

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    def get_state(self) -> TimerPhase:
        return self._state

    def is_paused(self) -> bool:
        return self._paused_at is not None

    def is_break(self) -> bool:
        return self._state.is_break

    def get_elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        now = self._paused_at if self._paused_at is not None else self._clock()
        return max(0.0, now - self._started_at)

    def get_remaining(self) -> float:
        if self._state == TimerPhase.IDLE:
            return 0.0
        return max(0.0, self.state_duration - self.get_elapsed())

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def set_state(self, phase: TimerPhase, duration: Optional[float] = None) -> None:
        self._state = phase
        self._paused_at = None
        if phase == TimerPhase.IDLE:
            self._started_at = None
            self.state_duration = 0.0
        else:
            self._started_at = self._clock()
            self.state_duration = duration if duration is not None else _default_duration(phase)
        self.emit("state-changed")
        self.emit("update")

    def start(self) -> None:
        if self._state == TimerPhase.IDLE:
            self.set_state(TimerPhase.WORK)

    def stop(self) -> None:
        if self._state != TimerPhase.IDLE:
            self.set_state(TimerPhase.IDLE)

    def skip(self) -> None:
        """Jump to the phase that would follow once the current one elapses."""
        if self._state == TimerPhase.IDLE:
            return
        self.set_state(self._next_phase())

    def pause(self) -> None:
        if self._state != TimerPhase.IDLE and self._paused_at is None:
            self._paused_at = self._clock()
            self.emit("update")

    def resume(self) -> None:
        if self._paused_at is not None and self._started_at is not None:
            self._started_at += self._clock() - self._paused_at
            self._paused_at = None
            self.emit("update")

    def tick(self) -> None:
        if self._state == TimerPhase.IDLE:
            return
        if not self.is_paused() and self.get_elapsed() >= self.state_duration:
            self.set_state(self._next_phase())
            return
        self.emit("update")

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _next_phase(self) -> TimerPhase:
        if self._state == TimerPhase.WORK:
            self.sessions_completed += 1
            if self.sessions_completed % config.long_break_interval == 0:
                return TimerPhase.LONG_BREAK
            return TimerPhase.SHORT_BREAK
        return TimerPhase.WORK


def _default_duration(phase: TimerPhase) -> float:
    if phase == TimerPhase.WORK:
        return float(config.work_seconds)
    if phase == TimerPhase.LONG_BREAK:
        return float(config.long_break_seconds)
    return float(config.short_break_seconds)
