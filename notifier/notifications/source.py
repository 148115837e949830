"""
Notification Source — the single tray source all timer notifications share.

The registry creates the source lazily and forgets it once it is destroyed.
A source destroys itself when its last notification goes away, but only
after the current event batch drained, so a notification removed and
replaced within the same batch keeps the same source alive.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from ..config import config
from ..signals import IdleHandle, IdleQueue, Subscription
from .tray import DestroyReason, MessageTray, Notification, Source

logger = logging.getLogger(__name__)


class PomodoroSource(Source):

    show_in_lock_screen = True
    details_in_lock_screen = True

    def __init__(
        self,
        idle: IdleQueue,
        on_show: Optional[Callable[[], None]] = None,
        title: Optional[str] = None,
        icon_name: Optional[str] = None,
    ):
        super().__init__(title or config.source_title, icon_name or config.icon_name)
        self._idle = idle
        self._on_show = on_show
        self._idle_handle: Optional[IdleHandle] = None

    @property
    def pending_auto_destroy(self) -> bool:
        return self._idle_handle is not None and not self._idle_handle.cancelled

    def show_notification(self, notification: Notification) -> None:
        if self.destroyed:
            logger.warning("Notification %s shown on a destroyed source; dropped", notification.id)
            return
        if self._on_show is not None:
            self._on_show()
        super().show_notification(notification)

    def _on_notification_destroy(self, notification: Notification, reason: DestroyReason) -> None:
        if notification not in self.notifications:
            return
        super()._on_notification_destroy(notification, reason)
        if not self.notifications:
            self._last_notification_removed()

    def _last_notification_removed(self) -> None:
        if self.pending_auto_destroy:
            return
        self._idle_handle = self._idle.idle_add(
            self._destroy_if_empty, name="PomodoroSource._last_notification_removed")

    def _destroy_if_empty(self) -> None:
        self._idle_handle = None
        if not self.notifications:
            self.destroy()

    def destroy_notifications(self) -> None:
        for notification in list(self.notifications):
            notification.destroy(DestroyReason.SOURCE_CLOSED)

    def destroy(self, reason: DestroyReason = DestroyReason.SOURCE_CLOSED) -> None:
        if self.destroyed:
            return
        self.destroy_notifications()
        self._idle.remove(self._idle_handle)
        self._idle_handle = None
        super().destroy(reason)


class NotificationSourceRegistry:
    """
    Holds the process-wide source. Owned by the notification service, not
    by the notifications, which only ask for it when they are shown.
    """

    def __init__(
        self,
        tray: MessageTray,
        idle: IdleQueue,
        on_show: Optional[Callable[[], None]] = None,
    ):
        self.tray = tray
        self._idle = idle
        self._on_show = on_show
        self._source: Optional[PomodoroSource] = None
        self._destroy_sub: Optional[Subscription] = None
        self.created_count = 0

    @property
    def current(self) -> Optional[PomodoroSource]:
        return self._source

    def get_or_create(self) -> PomodoroSource:
        if self._source is None:
            source = PomodoroSource(self._idle, on_show=self._on_show)
            self._destroy_sub = source.connect("destroy", self._on_source_destroy)
            self._source = source
            self.created_count += 1
            logger.debug("Created notification source")
        return self._source

    def _on_source_destroy(self, source: PomodoroSource, reason: DestroyReason) -> None:
        if self._source is source:
            self._source = None
            self._destroy_sub = None
            logger.debug("Notification source destroyed (%s)", reason.value)

    def destroy(self) -> None:
        if self._source is not None:
            self._source.destroy()
