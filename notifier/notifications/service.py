"""
Notification Service — decides which timer notifications exist.

  - last seconds of a pomodoro      → end notification ("about to end")
  - break started                   → end notification ("Take a break")
  - last seconds of a break         → start notification ("about to end")
  - pomodoro started after a break  → start notification ("Pomodoro")
  - timer stopped                   → no notifications

Each notification keeps its own content in sync; the service only creates
and destroys them.
"""

from __future__ import annotations

import logging
import webbrowser
from typing import Any, Callable, List, Optional

from ..signals import IdleQueue, Subscription
from ..timer import PomodoroTimer, TimerPhase
from .notification import (
    IssueNotification,
    PomodoroEndNotification,
    PomodoroNotification,
    PomodoroStartNotification,
    ScreenShieldNotification,
)
from .policy import NotificationContentPolicy
from .source import NotificationSourceRegistry
from .tray import DestroyReason, MessageTray, Notification
from .tray_mode import TrayModeManager

logger = logging.getLogger(__name__)


class NotificationService:

    def __init__(
        self,
        timer: PomodoroTimer,
        tray: MessageTray,
        idle: IdleQueue,
        policy: Optional[NotificationContentPolicy] = None,
        open_uri: Callable[[str], Any] = webbrowser.open,
    ):
        self.timer = timer
        self.tray = tray
        self.idle = idle
        self.policy = policy or NotificationContentPolicy()
        self.registry = NotificationSourceRegistry(tray, idle, on_show=self.ensure_tray_mode)
        self.tray_mode: Optional[TrayModeManager] = None
        self._open_uri = open_uri

        self.start_notification: Optional[PomodoroStartNotification] = None
        self.end_notification: Optional[PomodoroEndNotification] = None
        self.screen_shield: Optional[ScreenShieldNotification] = None

        self._timer_phase = timer.get_state()
        self._timer_subs: List[Subscription] = [
            timer.connect("state-changed", self._on_timer_state_changed),
            timer.connect("update", self._on_timer_update),
        ]

    # ------------------------------------------------------------------
    # Lifetime helpers
    # ------------------------------------------------------------------

    def ensure_tray_mode(self) -> TrayModeManager:
        if self.tray_mode is None:
            self.tray_mode = TrayModeManager(self.timer, self.tray)
        return self.tray_mode

    def _create(self, cls):
        notification = cls(self.timer, registry=self.registry, idle=self.idle, policy=self.policy)
        notification.connect("destroy", self._on_notification_destroy)
        notification.show()
        return notification

    def _on_notification_destroy(self, notification: Notification, reason: DestroyReason) -> None:
        if notification is self.start_notification:
            self.start_notification = None
        elif notification is self.end_notification:
            self.end_notification = None
        elif notification is self.screen_shield:
            self.screen_shield = None

    @staticmethod
    def _destroy(notification: Optional[PomodoroNotification]) -> None:
        if notification is not None and not notification.destroying:
            notification.destroy()

    # ------------------------------------------------------------------
    # Timer events
    # ------------------------------------------------------------------

    def _on_timer_state_changed(self, *args) -> None:
        phase = self.timer.get_state()
        previous = self._timer_phase
        if phase == previous:
            return
        self._timer_phase = phase

        if phase == TimerPhase.IDLE:
            self._destroy(self.start_notification)
            self._destroy(self.end_notification)
        elif phase.is_break:
            self._destroy(self.start_notification)
            if self.end_notification is None:
                self.end_notification = self._create(PomodoroEndNotification)
        else:
            self._destroy(self.end_notification)
            if previous.is_break and self.start_notification is None:
                self.start_notification = self._create(PomodoroStartNotification)

    def _on_timer_update(self, *args) -> None:
        if self.timer.is_paused():
            return
        if self.timer.get_remaining() > self.policy.pre_announcement_seconds:
            return

        phase = self.timer.get_state()
        if phase == TimerPhase.WORK and self.end_notification is None:
            self.end_notification = self._create(PomodoroEndNotification)
        elif phase.is_break and self.start_notification is None:
            self.start_notification = self._create(PomodoroStartNotification)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def set_screen_locked(self, locked: bool) -> None:
        if locked and self.screen_shield is None:
            self.screen_shield = self._create(ScreenShieldNotification)
        elif not locked:
            self._destroy(self.screen_shield)

    def report_issue(self, message: str) -> IssueNotification:
        notification = IssueNotification(message, registry=self.registry, open_uri=self._open_uri)
        notification.show()
        return notification

    def notifications(self) -> List[Notification]:
        source = self.registry.current
        return list(source.notifications) if source is not None else []

    def find(self, notification_id: int) -> Optional[Notification]:
        for notification in self.notifications():
            if notification.id == notification_id:
                return notification
        return None

    def destroy(self) -> None:
        for sub in self._timer_subs:
            self.timer.disconnect(sub)
        self._timer_subs.clear()

        self._destroy(self.screen_shield)
        self._destroy(self.start_notification)
        self._destroy(self.end_notification)

        if self.tray_mode is not None:
            self.tray_mode.destroy()
            self.tray_mode = None
        self.registry.destroy()
