"""
Tray Mode — adjusts the tray while the timer runs.

While the timer is not idle the do-not-disturb control is hidden, timer
notifications do not auto-expand despite their CRITICAL urgency, and the
message list shows them as TimerBanner entries. Everything is reverted when
the timer goes idle.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Protocol

from ..signals import Subscription
from ..timer import PomodoroTimer, TimerPhase
from .banner import TimerBanner
from .notification import PomodoroNotification
from .tray import Banner, Notification

logger = logging.getLogger(__name__)


class TrayCapabilities(Protocol):
    """Ambient tray behavior the host must let us toggle."""

    def hide_do_not_disturb_control(self) -> None: ...

    def show_do_not_disturb_control(self) -> None: ...

    def suppress_auto_expand(self, predicate: Callable[[Notification], bool]) -> None: ...

    def restore_auto_expand(self) -> None: ...

    def override_message_banners(
        self,
        predicate: Callable[[Notification], bool],
        factory: Callable[[Notification], Banner],
    ) -> None: ...

    def restore_message_banners(self) -> None: ...


def is_timer_notification(notification: Notification) -> bool:
    return isinstance(notification, PomodoroNotification)


class TrayModeManager:

    def __init__(
        self,
        timer: PomodoroTimer,
        tray: TrayCapabilities,
        predicate: Callable[[Notification], bool] = is_timer_notification,
    ):
        self.timer = timer
        self._tray = tray
        self._predicate = predicate
        self._active = False
        self._timer_sub: Optional[Subscription] = timer.connect(
            "state-changed", self._on_timer_state_changed)

        self._on_timer_state_changed()

    @property
    def active(self) -> bool:
        return self._active

    def _on_timer_state_changed(self, *args) -> None:
        if self.timer.get_state() != TimerPhase.IDLE:
            self.activate()
        else:
            self.deactivate()

    def activate(self) -> None:
        if self._active:
            return
        self._active = True
        self._tray.hide_do_not_disturb_control()
        self._tray.suppress_auto_expand(self._predicate)
        self._tray.override_message_banners(self._predicate, TimerBanner)
        logger.debug("Tray mode activated")

    def deactivate(self) -> None:
        if not self._active:
            return
        self._active = False
        self._tray.show_do_not_disturb_control()
        self._tray.restore_auto_expand()
        self._tray.restore_message_banners()
        logger.debug("Tray mode deactivated")

    def destroy(self) -> None:
        self.deactivate()
        if self._timer_sub is not None:
            self.timer.disconnect(self._timer_sub)
            self._timer_sub = None
