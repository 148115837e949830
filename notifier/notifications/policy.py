"""
Notification Content Policy — maps (kind, phase, paused, remaining) to the
content a notification should show.

Pure: no timer, no tray, no hidden state. Each rule maps a notification
kind and a set of timer phases to a title, urgency and residency; the
countdown body is derived from the remaining time alone.
"""

from __future__ import annotations

import gettext
import logging
import math
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

from ..config import config
from ..timer import TimerPhase

logger = logging.getLogger(__name__)

_BREAKS = (TimerPhase.SHORT_BREAK, TimerPhase.LONG_BREAK)


class Urgency(IntEnum):
    LOW = 0
    NORMAL = 1
    HIGH = 2
    CRITICAL = 3


class NotificationKind(str, Enum):
    START = "start"                  # pre-announces an upcoming work phase
    END = "end"                      # prompts once a work phase elapses
    SCREEN_SHIELD = "screen_shield"  # lock screen countdown


@dataclass(frozen=True)
class NotificationContent:
    title: str
    body_text: str
    urgency: Urgency
    resident: bool
    transient: bool

    def __post_init__(self):
        if self.resident == self.transient:
            raise ValueError("resident and transient must be complements")


@dataclass(frozen=True)
class ContentRule:
    kind: NotificationKind
    phases: Tuple[TimerPhase, ...]
    title: str                       # "" → use the phase label
    urgency: Urgency
    resident: bool
    description: str = ""


# ---------------------------------------------------------------------------
# Rule registry — first match wins
# ---------------------------------------------------------------------------

RULES: List[ContentRule] = [

    # ── START ──────────────────────────────────────────────────────────────
    ContentRule(
        kind=NotificationKind.START, phases=_BREAKS,
        title="Break is about to end", urgency=Urgency.CRITICAL, resident=False,
        description="Last seconds of a break: grab attention",
    ),
    ContentRule(
        kind=NotificationKind.START, phases=(TimerPhase.WORK,),
        title="Pomodoro", urgency=Urgency.HIGH, resident=False,
        description="Work has started: short-lived confirmation",
    ),

    # ── END ────────────────────────────────────────────────────────────────
    ContentRule(
        kind=NotificationKind.END, phases=(TimerPhase.WORK,),
        title="Pomodoro is about to end", urgency=Urgency.CRITICAL, resident=False,
        description="Last seconds of a pomodoro: grab attention",
    ),
    ContentRule(
        kind=NotificationKind.END, phases=_BREAKS,
        title="Take a break", urgency=Urgency.HIGH, resident=True,
        description="Break has started: stay until dismissed",
    ),

    # ── SCREEN SHIELD ──────────────────────────────────────────────────────
    ContentRule(
        kind=NotificationKind.SCREEN_SHIELD, phases=(TimerPhase.WORK,) + _BREAKS,
        title="", urgency=Urgency.HIGH, resident=True,
        description="Lock screen: phase name and countdown",
    ),
]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_remaining(
    remaining: float,
    minutes_threshold: float = 45.0,
    round_seconds_to: int = 0,
) -> str:
    """Countdown text, e.g. "25 minutes remaining" or "1 second remaining"."""
    remaining = max(remaining, 0.0)
    minutes = _round_half_up(remaining / 60)
    seconds = _round_half_up(remaining % 60)

    if round_seconds_to and remaining > round_seconds_to:
        seconds = int(math.ceil(seconds / round_seconds_to)) * round_seconds_to

    if remaining > minutes_threshold:
        return gettext.ngettext(
            "%d minute remaining", "%d minutes remaining", minutes) % minutes
    return gettext.ngettext(
        "%d second remaining", "%d seconds remaining", seconds) % seconds


class NotificationContentPolicy:
    """
    Evaluates the rule registry. Holds only configuration, so equal inputs
    always yield equal content.
    """

    def __init__(
        self,
        pre_announcement_seconds: Optional[float] = None,
        minutes_threshold_seconds: Optional[float] = None,
        screen_shield_round_seconds: Optional[int] = None,
    ):
        self.pre_announcement_seconds = (
            pre_announcement_seconds if pre_announcement_seconds is not None
            else config.pre_announcement_seconds)
        self.minutes_threshold_seconds = (
            minutes_threshold_seconds if minutes_threshold_seconds is not None
            else config.minutes_threshold_seconds)
        self.screen_shield_round_seconds = (
            screen_shield_round_seconds if screen_shield_round_seconds is not None
            else config.screen_shield_round_seconds)

    def match(self, kind: NotificationKind, phase: TimerPhase) -> Optional[ContentRule]:
        for rule in RULES:
            if rule.kind == kind and phase in rule.phases:
                return rule
        return None

    def evaluate(
        self,
        kind: NotificationKind,
        phase: TimerPhase,
        is_paused: bool,
        remaining: float,
    ) -> Optional[NotificationContent]:
        """Full content for a phase, or None to keep the current content."""
        if phase == TimerPhase.IDLE:
            return None

        rule = self.match(kind, phase)
        if rule is None:
            logger.warning("No %s notification content for phase %s", kind.value, phase)
            return None

        if kind == NotificationKind.SCREEN_SHIELD and is_paused:
            title = "Paused"
        else:
            title = rule.title or phase.label

        return NotificationContent(
            title=title,
            body_text=self.body_text(kind, remaining),
            urgency=rule.urgency,
            resident=rule.resident,
            transient=not rule.resident,
        )

    def body_text(self, kind: NotificationKind, remaining: float) -> str:
        round_to = self.screen_shield_round_seconds if kind == NotificationKind.SCREEN_SHIELD else 0
        return format_remaining(remaining, self.minutes_threshold_seconds, round_to)

    def decay_urgency(self, urgency: Urgency, remaining: float) -> Urgency:
        """CRITICAL is only held inside the pre-announcement window."""
        if urgency == Urgency.CRITICAL and remaining > self.pre_announcement_seconds:
            return Urgency.HIGH
        return urgency

    def tick(self, kind: NotificationKind, content: NotificationContent,
             remaining: float) -> NotificationContent:
        """Content after a timer update: fresh countdown, decayed urgency."""
        return replace(
            content,
            body_text=self.body_text(kind, remaining),
            urgency=self.decay_urgency(content.urgency, remaining),
        )
