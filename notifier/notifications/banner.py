"""
Banners — mirror a timer notification into its visible surface.

A banner copies title and countdown from its notification on "changed" and
on every timer "update". Updates are frozen while a button press is being
handled, and end-of-phase banners also stay frozen while they are on
screen and the timer has already moved to another phase, so the user does
not see the banner jump to the next phase's text.
"""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Tuple

from ..config import config
from ..signals import EventEmitter, IdleHandle, IdleQueue, Subscription
from ..timer import TimerPhase
from .policy import Urgency, format_remaining
from .tray import ActionButton, Banner


class NotificationBanner(Banner):

    freeze_on_phase_change = False

    def __init__(self, notification, *, idle: IdleQueue):
        super().__init__(notification)
        self.timer = notification.timer
        self._idle = idle
        self._initial_phase = self.timer.get_state()
        self._action_handle: Optional[IdleHandle] = None
        self._body_text: Optional[str] = None
        self._heading: Optional[Tuple[str, Urgency]] = None
        self._watched: List[Tuple[EventEmitter, Subscription]] = []

        self._watch(self.timer, "update", self._on_timer_update)
        self._watch(notification, "changed", self._on_notification_changed)
        self._watch(notification, "destroy", self._release)
        self.connect("close", self._release)

        self._setup_actions()
        self._on_notification_changed()
        self._on_timer_update()

    def _watch(self, emitter: EventEmitter, event: str, handler: Callable[..., Any]) -> None:
        self._watched.append((emitter, emitter.connect(event, handler)))

    def _release(self, *args) -> None:
        for emitter, sub in self._watched:
            emitter.disconnect(sub)
        self._watched.clear()

    @property
    def subscribed(self) -> bool:
        return bool(self._watched)

    def can_close(self) -> bool:
        return False

    @property
    def frozen(self) -> bool:
        if self._action_handle is not None:
            return True
        return (self.freeze_on_phase_change
                and self.mapped
                and self.timer.get_state() != self._initial_phase)

    def _run_action(self, callback: Callable[[], Any]) -> None:
        if self._action_handle is None:
            self._action_handle = self._idle.idle_add(
                self._on_action_done, name="NotificationBanner._run_action")
        callback()

    def _on_action_done(self) -> None:
        self._action_handle = None

    # ------------------------------------------------------------------
    # Mirroring
    # ------------------------------------------------------------------

    def _title_text(self) -> str:
        return self.notification.title

    def _setup_actions(self) -> None:
        pass

    def _sync_actions(self) -> None:
        pass

    def _on_timer_update(self, *args) -> None:
        if self.frozen:
            return
        body_text = self.notification.body
        if body_text != self._body_text:
            self._body_text = body_text
            self.set_body(body_text)

    def _on_notification_changed(self, *args) -> None:
        if self.frozen:
            return
        # countdown-only changes must not collapse an expanded banner
        heading = (self._title_text(), self.notification.urgency)
        if heading != self._heading:
            self._heading = heading
            self.set_title(heading[0])
            self.unexpand()
            self._sync_actions()
        self._on_timer_update()

    def destroy(self) -> None:
        self._release()
        self._idle.remove(self._action_handle)
        self._action_handle = None
        super().destroy()


class StartBanner(NotificationBanner):
    """"+1 Minute" is offered only while the break is still running."""

    def __init__(self, notification, *, idle: IdleQueue):
        self._extend_button: Optional[ActionButton] = None
        super().__init__(notification, idle=idle)

    def _sync_actions(self) -> None:
        if self.timer.is_break():
            if self._extend_button is None:
                self._extend_button = self.add_action(
                    "+1 Minute", lambda: self._run_action(self.notification.extend))
        elif self._extend_button is not None:
            self._extend_button.destroy()
            self._extend_button = None


class EndBanner(NotificationBanner):

    freeze_on_phase_change = True

    def _setup_actions(self) -> None:
        self.add_action("Skip Break", lambda: self._run_action(self._skip_break))
        self.add_action("+1 Minute", lambda: self._run_action(self.notification.extend))

    def _skip_break(self) -> None:
        self.close()
        self.timer.set_state(TimerPhase.WORK)

    def _title_text(self) -> str:
        state = self.timer.get_state()
        if state.is_break:
            return state.label
        return self.notification.title


class TimerBanner(Banner):
    """Message list entry for timer notifications: phase, countdown, Skip, +1 Minute."""

    def __init__(self, notification):
        super().__init__(notification)
        self.timer = notification.timer

        self._is_paused: Optional[bool] = None
        self._timer_phase: Optional[TimerPhase] = None
        self._body_text: Optional[str] = None
        self._timer_sub: Optional[Subscription] = self.timer.connect("update", self._on_timer_update)
        self._on_timer_update()

        self.add_action("Skip", self._on_skip, dismiss=False)
        self.add_action("+1 Minute", self._on_extend, dismiss=False)

        self.connect("close", self._on_close)

    def can_close(self) -> bool:
        return False

    @property
    def subscribed(self) -> bool:
        return self._timer_sub is not None

    def _on_skip(self) -> None:
        self.timer.skip()
        self.notification.destroy()

    def _on_extend(self) -> None:
        self.timer.state_duration += config.extend_seconds

    def _on_timer_state_changed(self) -> None:
        if self.timer.is_paused():
            title = "Paused"
        else:
            title = self.timer.get_state().label
        if title:
            self.set_title(title)

    def _on_timer_elapsed_changed(self) -> None:
        body_text = format_remaining(self.timer.get_remaining(), config.minutes_threshold_seconds)
        if body_text != self._body_text:
            self._body_text = body_text
            self.set_body(body_text)

    def _on_timer_update(self, *args) -> None:
        timer_phase = self.timer.get_state()
        is_paused = self.timer.is_paused()

        if self._timer_phase != timer_phase or self._is_paused != is_paused:
            self._timer_phase = timer_phase
            self._is_paused = is_paused
            self._on_timer_state_changed()

        if self._timer_phase != TimerPhase.IDLE:
            self._on_timer_elapsed_changed()

    def _on_close(self, *args) -> None:
        if self._timer_sub is not None:
            self.timer.disconnect(self._timer_sub)
            self._timer_sub = None

    def destroy(self) -> None:
        self._on_close()
        super().destroy()
