"""
Message Tray — in-memory host for notifications, sources and banners.

Stands in for the desktop shell's notification area so the notification
core runs headless. Sources own notifications; the tray shows one
notification at a time as a banner, hides it after a timeout unless it is
CRITICAL, and auto-expands CRITICAL ones.
"""

from __future__ import annotations

import itertools
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..signals import EventEmitter, Subscription
from .policy import Urgency

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class DestroyReason(str, Enum):
    EXPIRED = "expired"
    DISMISSED = "dismissed"
    SOURCE_CLOSED = "source_closed"
    REPLACED = "replaced"


@dataclass
class NotificationAction:
    label: str
    callback: Callable[[], Any]


# ---------------------------------------------------------------------------
# Notification
# ---------------------------------------------------------------------------

class Notification(EventEmitter):
    """Signals: "destroy" (reason), "activated"."""

    def __init__(
        self,
        source: Optional["Source"] = None,
        title: str = "",
        body: Optional[str] = None,
        *,
        urgency: Urgency = Urgency.NORMAL,
        resident: bool = False,
        transient: bool = False,
    ):
        super().__init__()
        self.id = next(_ids)
        self.created_at = time.time()
        self.source = source
        self.title = title
        self.body = body
        self.urgency = urgency
        self.resident = resident
        self.transient = transient
        self.for_feedback = False
        self.acknowledged = False
        self.destroyed = False
        self.actions: List[NotificationAction] = []

    def set_urgency(self, urgency: Urgency) -> None:
        self.urgency = urgency

    def set_resident(self, resident: bool) -> None:
        self.resident = resident

    def set_transient(self, transient: bool) -> None:
        self.transient = transient

    def set_for_feedback(self, for_feedback: bool) -> None:
        self.for_feedback = for_feedback

    def add_action(self, label: str, callback: Callable[[], Any]) -> None:
        self.actions.append(NotificationAction(label, callback))

    def activate(self) -> None:
        self.emit("activated")
        if not self.resident:
            self.destroy()

    def create_banner(self) -> "Banner":
        return Banner(self)

    def destroy(self, reason: DestroyReason = DestroyReason.DISMISSED) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        self.emit("destroy", reason)


# ---------------------------------------------------------------------------
# Banner
# ---------------------------------------------------------------------------

class ActionButton:

    def __init__(
        self,
        banner: "Banner",
        label: str,
        callback: Callable[[], Any],
        dismiss: bool = True,
    ):
        self._banner = banner
        self.label = label
        self._callback = callback
        self.dismiss = dismiss
        self.destroyed = False

    def click(self) -> None:
        """Run the action; a non-resident notification is done afterwards."""
        if self.destroyed:
            return
        self._callback()
        notification = self._banner.notification
        if self.dismiss and not notification.resident and not notification.destroyed:
            notification.destroy(DestroyReason.DISMISSED)

    def destroy(self) -> None:
        if not self.destroyed:
            self.destroyed = True
            self._banner._remove_button(self)


class Banner(EventEmitter):
    """Visible surface of a notification. Signals: "close", "destroy", "mapped"."""

    def __init__(self, notification: Notification):
        super().__init__()
        self.notification = notification
        self.title = notification.title
        self.body = notification.body
        self.mapped = False
        self.expanded = False
        self.closed = False
        self.destroyed = False
        self.buttons: List[ActionButton] = []
        for action in notification.actions:
            self.add_action(action.label, action.callback)

    def set_title(self, title: str) -> None:
        self.title = title

    def set_body(self, body: Optional[str]) -> None:
        self.body = body

    def add_action(self, label: str, callback: Callable[[], Any], dismiss: bool = True) -> ActionButton:
        button = ActionButton(self, label, callback, dismiss)
        self.buttons.append(button)
        return button

    def _remove_button(self, button: ActionButton) -> None:
        if button in self.buttons:
            self.buttons.remove(button)

    def action_labels(self) -> List[str]:
        return [b.label for b in self.buttons]

    def expand(self) -> None:
        self.expanded = True

    def unexpand(self) -> None:
        self.expanded = False

    def map(self) -> None:
        if not self.mapped:
            self.mapped = True
            self.emit("mapped")

    def unmap(self) -> None:
        if self.mapped:
            self.mapped = False
            self.emit("mapped")

    def can_close(self) -> bool:
        return True

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self.emit("close")

    def destroy(self) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        self.mapped = False
        self.emit("destroy")
        self.disconnect_all()


# ---------------------------------------------------------------------------
# Source
# ---------------------------------------------------------------------------

class Source(EventEmitter):
    """
    Groups notifications of one application.

    Signals: "notification-added", "notification-show", "count-updated",
    "title-changed", "destroy".
    """

    show_in_lock_screen = False
    details_in_lock_screen = False

    def __init__(self, title: str, icon_name: str):
        super().__init__()
        self.title = title
        self.icon_name = icon_name
        self.notifications: List[Notification] = []
        self.destroyed = False
        self._notification_subs: Dict[int, Subscription] = {}

    @property
    def count(self) -> int:
        return len(self.notifications)

    def set_title(self, title: str) -> None:
        if title != self.title:
            self.title = title
            self.emit("title-changed")

    def push_notification(self, notification: Notification) -> None:
        if notification in self.notifications:
            return
        notification.source = self
        self._notification_subs[notification.id] = notification.connect(
            "destroy", self._on_notification_destroy)
        self.notifications.append(notification)
        self.emit("notification-added", notification)
        self.count_updated()

    def show_notification(self, notification: Notification) -> None:
        self.push_notification(notification)
        self.emit("notification-show", notification)

    def _on_notification_destroy(self, notification: Notification, reason: DestroyReason) -> None:
        sub = self._notification_subs.pop(notification.id, None)
        notification.disconnect(sub)
        if notification in self.notifications:
            self.notifications.remove(notification)
            self.count_updated()

    def count_updated(self) -> None:
        self.emit("count-updated")

    notify_count = count_updated

    def destroy(self, reason: DestroyReason = DestroyReason.SOURCE_CLOSED) -> None:
        if self.destroyed:
            return
        self.destroyed = True
        self.emit("destroy", reason)
        self.disconnect_all()


# ---------------------------------------------------------------------------
# Message Tray
# ---------------------------------------------------------------------------

class MessageTray:
    """
    Shows queued notifications one at a time.

    Also implements the ambient tray controls TrayModeManager toggles
    (do-not-disturb control, auto-expand, message list banners).
    """

    def __init__(self, transient_timeout_ms: int = 4000, clock: Callable[[], float] = time.time):
        self.transient_timeout_ms = transient_timeout_ms
        self._clock = clock
        self.sources: List[Source] = []
        self._source_subs: Dict[int, List[Subscription]] = {}
        self._queue: List[Notification] = []
        self.notification: Optional[Notification] = None
        self.banner: Optional[Banner] = None
        self._current_sub: Optional[Subscription] = None
        self._expires_at: Optional[float] = None

        self.do_not_disturb_visible = True
        self.calendar_open = False
        self.screen_wakeups = 0
        self._auto_expand_filter: Optional[Callable[[Notification], bool]] = None
        self._banner_override: Optional[Tuple[Callable[[Notification], bool],
                                              Callable[[Notification], Banner]]] = None

    # ------------------------------------------------------------------
    # Sources
    # ------------------------------------------------------------------

    def contains(self, source: Source) -> bool:
        return source in self.sources

    def add(self, source: Source) -> None:
        if self.contains(source):
            return
        self.sources.append(source)
        self._source_subs[id(source)] = [
            source.connect("notification-show", self._on_notification_show),
            source.connect("destroy", self._on_source_destroy),
        ]

    def _on_source_destroy(self, source: Source, reason: DestroyReason) -> None:
        for sub in self._source_subs.pop(id(source), []):
            source.disconnect(sub)
        if source in self.sources:
            self.sources.remove(source)
        self.update_state()

    def _on_notification_show(self, source: Source, notification: Notification) -> None:
        if notification is not self.notification and notification not in self._queue:
            self._queue.append(notification)
            self._queue.sort(key=lambda n: n.urgency, reverse=True)
        self.update_state()

    # ------------------------------------------------------------------
    # Display state
    # ------------------------------------------------------------------

    @property
    def expires_at(self) -> Optional[float]:
        return self._expires_at

    def is_shown(self, notification: Notification) -> bool:
        return self.notification is notification

    def update_state(self) -> None:
        self._queue = [n for n in self._queue if not n.destroyed]
        if self.notification is not None and self.notification.destroyed:
            self._hide()

        if self.notification is None and self._queue:
            self._show(self._queue.pop(0))

        if self.notification is not None and self.banner is not None:
            if self.notification.urgency == Urgency.CRITICAL and not self.banner.expanded:
                self._expand_banner(auto_expanding=True)

    def update_notification_timeout(self, timeout_ms: int) -> None:
        if self.notification is not None:
            self._expires_at = self._clock() + timeout_ms / 1000.0

    def tick(self, now: Optional[float] = None) -> None:
        """
        Expire the displayed banner once its timeout passed.

        CRITICAL notifications stay open. Transient ones are destroyed, the
        rest only lose their banner and remain in the source.
        """
        if self.notification is None or self._expires_at is None:
            return
        now = self._clock() if now is None else now
        if now < self._expires_at:
            return

        notification = self.notification
        if notification.urgency == Urgency.CRITICAL:
            return
        if notification.transient:
            notification.destroy(DestroyReason.EXPIRED)
        else:
            self._hide()
        self.update_state()

    def _show(self, notification: Notification) -> None:
        self.notification = notification
        self._current_sub = notification.connect("destroy", self._on_current_destroy)
        self.banner = notification.create_banner()
        self.banner.map()
        self._expires_at = self._clock() + self.transient_timeout_ms / 1000.0

    def _hide(self) -> None:
        if self.notification is not None:
            self.notification.disconnect(self._current_sub)
        self._current_sub = None
        if self.banner is not None:
            self.banner.destroy()
        self.banner = None
        self.notification = None
        self._expires_at = None

    def _on_current_destroy(self, notification: Notification, reason: DestroyReason) -> None:
        if notification is self.notification:
            self._hide()
            self.update_state()

    def _expand_banner(self, auto_expanding: bool) -> None:
        if self.banner is None or self.notification is None:
            return
        if auto_expanding and self._auto_expand_filter and self._auto_expand_filter(self.notification):
            return
        self.banner.expand()

    def create_message_banner(self, notification: Notification) -> Banner:
        """Banner for the message list; the caller destroys it."""
        if self._banner_override is not None:
            predicate, factory = self._banner_override
            if predicate(notification):
                return factory(notification)
        return Banner(notification)

    def close_calendar(self) -> None:
        self.calendar_open = False

    # ------------------------------------------------------------------
    # Tray capabilities
    # ------------------------------------------------------------------

    def hide_do_not_disturb_control(self) -> None:
        self.do_not_disturb_visible = False

    def show_do_not_disturb_control(self) -> None:
        self.do_not_disturb_visible = True

    def suppress_auto_expand(self, predicate: Callable[[Notification], bool]) -> None:
        self._auto_expand_filter = predicate

    def restore_auto_expand(self) -> None:
        self._auto_expand_filter = None

    @property
    def auto_expand_suppressed(self) -> bool:
        return self._auto_expand_filter is not None

    def override_message_banners(
        self,
        predicate: Callable[[Notification], bool],
        factory: Callable[[Notification], Banner],
    ) -> None:
        self._banner_override = (predicate, factory)

    def restore_message_banners(self) -> None:
        self._banner_override = None

    @property
    def message_banners_overridden(self) -> bool:
        return self._banner_override is not None

    def wake_up_screen(self) -> None:
        self.screen_wakeups += 1
