"""
Timer notifications — keep a tray notification in sync with the timer.

Each notification subscribes to the timer, asks the content policy what it
should say and applies the answer only when it differs from what is already
shown. "changed" fires once per applied change; banners listen to it.
"""

from __future__ import annotations

import logging
import webbrowser
from enum import Enum
from typing import Any, Callable, List, Optional

from ..config import config
from ..signals import IdleHandle, IdleQueue, Subscription
from ..timer import PomodoroTimer, TimerPhase
from .banner import EndBanner, StartBanner
from .policy import NotificationContent, NotificationContentPolicy, NotificationKind, Urgency
from .source import NotificationSourceRegistry
from .tray import Banner, DestroyReason, Notification

logger = logging.getLogger(__name__)


class ControllerState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    DESTROYING = "destroying"


class PomodoroNotification(Notification):
    """
    Base for notifications driven by the timer.

    destroy() is one-shot: the tray may expire a notification while it is
    being dismissed, so a second call only logs a warning.
    """

    def __init__(
        self,
        timer: PomodoroTimer,
        *,
        registry: NotificationSourceRegistry,
        idle: IdleQueue,
        policy: Optional[NotificationContentPolicy] = None,
    ):
        super().__init__(None, "", None)
        self.timer = timer
        self.policy = policy or NotificationContentPolicy()
        self.tray = registry.tray
        self._registry = registry
        self._idle = idle
        self._state = ControllerState.UNINITIALIZED
        self._destroying = False
        self._content: Optional[NotificationContent] = None
        self._grace_handle: Optional[IdleHandle] = None
        self._timer_subs: List[Subscription] = []

        # Show notification regardless of session busy status.
        self.set_for_feedback(True)

        # Shown right after a user action, therefore urgency bump.
        self.set_urgency(Urgency.HIGH)

    @property
    def state(self) -> ControllerState:
        return self._state

    @property
    def destroying(self) -> bool:
        return self._destroying

    @property
    def content(self) -> Optional[NotificationContent]:
        return self._content

    def _subscribe_timer(self, event: str, handler: Callable[..., Any]) -> None:
        self._timer_subs.append(self.timer.connect(event, handler))

    def _release_timer(self) -> None:
        for sub in self._timer_subs:
            self.timer.disconnect(sub)
        self._timer_subs.clear()

    # ------------------------------------------------------------------
    # Content
    # ------------------------------------------------------------------

    def _apply(self, content: NotificationContent) -> bool:
        if self._destroying or content == self._content:
            return False

        self.title = content.title
        self.body = content.body_text
        self.set_urgency(content.urgency)
        self.set_resident(content.resident or self._grace_handle is not None)
        self.set_transient(content.transient)
        self._content = content

        if self.tray.is_shown(self):
            self.tray.update_notification_timeout(config.notification_timeout_ms)
        self.tray.update_state()

        self.emit("changed")
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def show(self) -> None:
        if self._destroying:
            logger.warning("Called show() after destroy() on notification %s", self.id)
            return

        if self.source is None:
            self.source = self._registry.get_or_create()

        if self.source.destroyed:
            logger.warning("Source of notification %s is gone; not shown", self.id)
            return

        self.acknowledged = False
        if not self.tray.contains(self.source):
            self.tray.add(self.source)
        self.source.show_notification(self)

    def activate(self) -> None:
        super().activate()
        self.tray.close_calendar()

    def extend(self) -> None:
        """Add a minute to the current phase and keep this notification open."""
        self.timer.state_duration += config.extend_seconds
        self.prevent_destroy()

    def prevent_destroy(self) -> None:
        """Hold the notification resident until the current event batch drained."""
        if self.resident or self._destroying:
            return
        self.set_resident(True)
        self._grace_handle = self._idle.idle_add(
            self._release_grace, name="PomodoroNotification.prevent_destroy")

    def _release_grace(self) -> None:
        self._grace_handle = None
        self.set_resident(self._content.resident if self._content else False)

    def destroy(self, reason: DestroyReason = DestroyReason.DISMISSED) -> None:
        if self._destroying:
            logger.warning("Already called destroy() on notification %s", self.id)
            return
        self._destroying = True
        self._state = ControllerState.DESTROYING

        self._release_timer()
        self._idle.remove(self._grace_handle)
        self._grace_handle = None

        super().destroy(reason)


class TimerNotification(PomodoroNotification):
    """Follows timer phases; title and urgency change only on a new phase."""

    kind: NotificationKind

    def __init__(self, timer: PomodoroTimer, **kwargs):
        super().__init__(timer, **kwargs)
        self._timer_phase: Optional[TimerPhase] = None

        self._subscribe_timer("state-changed", self._on_timer_state_changed)
        self._subscribe_timer("update", self._on_timer_update)
        self._state = ControllerState.ACTIVE

        self._on_timer_state_changed()

    @property
    def timer_phase(self) -> Optional[TimerPhase]:
        return self._timer_phase

    def _on_timer_state_changed(self, *args) -> None:
        phase = self.timer.get_state()

        # "state-changed" may be delivered more than once per transition
        if self._timer_phase == phase:
            return
        self._timer_phase = phase

        content = self.policy.evaluate(
            self.kind, phase, self.timer.is_paused(), self.timer.get_remaining())
        if content is None:
            # keep notification as is until destroyed
            return
        self._apply(content)

    def _on_timer_update(self, *args) -> None:
        if self._content is None or self._timer_phase == TimerPhase.IDLE:
            return
        self._apply(self.policy.tick(self.kind, self._content, self.timer.get_remaining()))


class PomodoroStartNotification(TimerNotification):
    """Pops up a little before a pomodoro starts and changes message once started."""

    kind = NotificationKind.START

    def create_banner(self) -> Banner:
        return StartBanner(self, idle=self._idle)


class PomodoroEndNotification(TimerNotification):
    """Pops up a little before a pomodoro ends and stays during the break."""

    kind = NotificationKind.END

    def create_banner(self) -> Banner:
        return EndBanner(self, idle=self._idle)


class ScreenShieldNotification(PomodoroNotification):
    """Resident countdown for the lock screen."""

    kind = NotificationKind.SCREEN_SHIELD

    def __init__(self, timer: PomodoroTimer, **kwargs):
        super().__init__(timer, **kwargs)
        self.set_transient(False)
        self.set_resident(True)
        self.source = self._registry.get_or_create()

        self._is_paused = False
        self._timer_phase = TimerPhase.IDLE

        self._subscribe_timer("update", self._on_timer_update)
        self._state = ControllerState.ACTIVE

        self._on_timer_update()

    def _on_timer_state_changed(self) -> None:
        # Application name could be confused with the phase name, so the
        # source shows the current phase instead.
        if self.source is not None:
            self.source.set_title(self._timer_phase.label)
        self.tray.wake_up_screen()

    def _on_timer_update(self, *args) -> None:
        phase = self.timer.get_state()
        is_paused = self.timer.is_paused()

        if self._timer_phase != phase or self._is_paused != is_paused:
            self._timer_phase = phase
            self._is_paused = is_paused
            self._on_timer_state_changed()

        content = self.policy.evaluate(self.kind, phase, is_paused, self.timer.get_remaining())
        if content is not None and self._apply(content) and self.source is not None:
            # force the lock screen to re-read the notification
            self.source.notify_count()

    def destroy(self, reason: DestroyReason = DestroyReason.DISMISSED) -> None:
        if not self._destroying and self.source is not None and not self.source.destroyed:
            self.source.set_title(config.source_title)
        super().destroy(reason)


class IssueNotification(Notification):
    """
    Asks the user to report a problem.

    Deliberately a plain tray notification, in case the issue lies in the
    timer notifications themselves.
    """

    def __init__(
        self,
        message: str,
        *,
        registry: NotificationSourceRegistry,
        open_uri: Callable[[str], Any] = webbrowser.open,
        url: Optional[str] = None,
    ):
        super().__init__(registry.get_or_create(), config.source_title, message)
        self.tray = registry.tray
        self.url = url or config.bug_report_url
        self._open_uri = open_uri

        self.set_transient(True)
        self.set_urgency(Urgency.HIGH)
        self.add_action("Report issue", self._on_report_issue)

    def _on_report_issue(self) -> None:
        self._open_uri(self.url)
        self.destroy()

    def show(self) -> None:
        if self.source is None or self.source.destroyed:
            logger.warning("Source of issue notification %s is gone; not shown", self.id)
            return
        if not self.tray.contains(self.source):
            self.tray.add(self.source)
        self.source.show_notification(self)
