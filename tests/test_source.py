"""Tests for the shared notification source and its registry."""

import logging

from notifier.notifications.source import NotificationSourceRegistry, PomodoroSource
from notifier.notifications.tray import DestroyReason, Notification


class TestPomodoroSource:
    def test_lock_screen_flags(self, idle):
        source = PomodoroSource(idle)
        assert source.show_in_lock_screen
        assert source.details_in_lock_screen
        assert source.title == "Pomodoro Timer"

    def test_on_show_runs_before_the_notification_is_added(self, idle):
        seen = []
        source = PomodoroSource(idle, on_show=lambda: seen.append(len(source.notifications)))
        source.show_notification(Notification(title="hello"))
        assert seen == [0]
        assert source.count == 1

    def test_last_notification_removed_defers_destroy(self, idle):
        source = PomodoroSource(idle)
        notification = Notification(title="hello")
        source.show_notification(notification)
        notification.destroy()

        assert source.count == 0
        assert source.pending_auto_destroy
        assert not source.destroyed

        idle.run_pending()
        assert source.destroyed

    def test_show_on_destroyed_source_is_dropped(self, idle, caplog):
        source = PomodoroSource(idle)
        source.destroy()
        notification = Notification(title="late")
        with caplog.at_level(logging.WARNING):
            source.show_notification(notification)
        assert source.count == 0
        assert "destroyed source" in caplog.text

    def test_destroy_closes_notifications(self, idle):
        source = PomodoroSource(idle)
        notification = Notification(title="hello")
        reasons = []
        notification.connect("destroy", lambda n, reason: reasons.append(reason))
        source.show_notification(notification)

        source.destroy()
        assert reasons == [DestroyReason.SOURCE_CLOSED]
        assert not source.pending_auto_destroy
        assert len(idle) == 0

    def test_count_updated_signals(self, idle):
        source = PomodoroSource(idle)
        counts = []
        source.connect("count-updated", lambda s: counts.append(s.count))
        notification = Notification(title="hello")
        source.show_notification(notification)
        notification.destroy()
        assert counts == [1, 0]


class TestNotificationSourceRegistry:
    def test_get_or_create_reuses_the_source(self, registry):
        first = registry.get_or_create()
        assert registry.get_or_create() is first
        assert registry.created_count == 1

    def test_replacement_within_the_same_batch_keeps_the_source(self, registry, idle):
        source = registry.get_or_create()
        old = Notification(title="old")
        source.show_notification(old)
        old.destroy()

        replacement = Notification(title="new")
        registry.get_or_create().show_notification(replacement)
        idle.run_pending()

        assert not source.destroyed
        assert registry.current is source
        assert registry.created_count == 1
        assert source.notifications == [replacement]

    def test_destroyed_source_is_forgotten(self, registry, idle):
        source = registry.get_or_create()
        notification = Notification(title="hello")
        source.show_notification(notification)
        notification.destroy()
        idle.run_pending()

        assert registry.current is None
        assert registry.get_or_create() is not source
        assert registry.created_count == 2

    def test_on_show_is_passed_to_new_sources(self, tray, idle):
        calls = []
        registry = NotificationSourceRegistry(tray, idle, on_show=lambda: calls.append(1))
        registry.get_or_create().show_notification(Notification(title="hello"))
        assert calls == [1]

    def test_destroy(self, registry):
        source = registry.get_or_create()
        registry.destroy()
        assert source.destroyed
        assert registry.current is None
        registry.destroy()
