"""Tests for timer-driven notifications."""

import logging

import pytest

from notifier.notifications.banner import EndBanner
from notifier.notifications.notification import (
    ControllerState,
    IssueNotification,
    PomodoroEndNotification,
    PomodoroStartNotification,
    ScreenShieldNotification,
)
from notifier.notifications.policy import Urgency
from notifier.notifications.tray import DestroyReason
from notifier.timer import TimerPhase


@pytest.fixture()
def make(timer, registry, idle, policy):
    def _make(cls):
        return cls(timer, registry=registry, idle=idle, policy=policy)
    return _make


def _count_changed(notification):
    events = []
    notification.connect("changed", lambda n: events.append(n.body))
    return events


class TestPhaseTransitions:
    def test_start_notification_when_work_starts(self, timer, make):
        notification = make(PomodoroStartNotification)
        assert notification.content is None
        assert notification.state == ControllerState.ACTIVE

        timer.start()
        assert notification.title == "Pomodoro"
        assert notification.urgency == Urgency.HIGH
        assert notification.transient and not notification.resident

    def test_end_notification_counts_down_the_work_phase(self, timer, make):
        notification = make(PomodoroEndNotification)
        timer.start()
        assert timer.state_duration == 1500
        assert notification.body == "25 minutes remaining"
        assert notification.title == "Pomodoro is about to end"

    def test_minutes_switch_to_seconds(self, timer, make, advance_to):
        timer.start()
        notification = make(PomodoroEndNotification)
        advance_to(46)
        assert notification.body == "1 minute remaining"
        title, urgency = notification.title, notification.urgency

        changed = _count_changed(notification)
        advance_to(44)
        assert changed == ["44 seconds remaining"]
        assert notification.title == title
        assert notification.urgency == urgency

    def test_unchanged_content_emits_nothing(self, timer, make, clock):
        timer.start()
        notification = make(PomodoroEndNotification)
        timer.tick()
        changed = _count_changed(notification)
        clock.advance(0.2)
        timer.tick()
        assert changed == []

    def test_break_turns_end_notification_resident(self, timer, make, advance_to):
        timer.start()
        notification = make(PomodoroEndNotification)
        advance_to(0)
        assert timer.get_state() == TimerPhase.SHORT_BREAK
        assert notification.title == "Take a break"
        assert notification.resident and not notification.transient
        assert notification.body == "5 minutes remaining"

    def test_idle_keeps_previous_content(self, timer, make):
        timer.start()
        notification = make(PomodoroEndNotification)
        content = notification.content
        timer.stop()
        assert notification.content == content

    def test_redelivered_state_change_is_ignored(self, timer, make):
        timer.start()
        notification = make(PomodoroStartNotification)
        changed = _count_changed(notification)
        timer.emit("state-changed")
        assert changed == []


class TestExtend:
    def test_extend_demotes_urgency_on_next_tick(self, timer, make, advance_to, idle):
        timer.start()
        notification = make(PomodoroEndNotification)
        advance_to(5)
        assert notification.urgency == Urgency.CRITICAL

        notification.extend()
        assert timer.state_duration == 1560
        assert notification.resident

        timer.tick()
        assert timer.get_remaining() > 10
        assert notification.urgency == Urgency.HIGH
        assert notification.body == "1 minute remaining"
        assert notification.resident

        idle.run_pending()
        assert not notification.resident

    def test_prevent_destroy_survives_expiry(self, timer, make, advance_to, tray, clock, idle):
        timer.start()
        notification = make(PomodoroEndNotification)
        advance_to(5)
        notification.show()
        assert tray.is_shown(notification)

        notification.prevent_destroy()
        clock.advance(10)
        tray.tick()
        assert not notification.destroyed
        assert tray.is_shown(notification)


class TestDestroy:
    def test_destroy_twice_warns_once(self, timer, make, caplog):
        baseline = timer.handler_count("update")
        notification = make(PomodoroEndNotification)
        assert timer.handler_count("update") == baseline + 1

        reasons = []
        notification.connect("destroy", lambda n, reason: reasons.append(reason))
        with caplog.at_level(logging.WARNING):
            notification.destroy()
            notification.destroy()

        assert notification.state == ControllerState.DESTROYING
        assert reasons == [DestroyReason.DISMISSED]
        assert timer.handler_count("update") == baseline
        assert timer.handler_count("state-changed") == 0
        warnings = [r for r in caplog.records if "Already called destroy()" in r.getMessage()]
        assert len(warnings) == 1

    def test_destroyed_notification_ignores_timer(self, timer, make):
        notification = make(PomodoroEndNotification)
        notification.destroy()
        timer.start()
        assert notification.content is None

    def test_show_after_destroy_warns(self, make, tray, caplog):
        notification = make(PomodoroEndNotification)
        notification.destroy()
        with caplog.at_level(logging.WARNING):
            notification.show()
        assert "Called show() after destroy()" in caplog.text
        assert tray.notification is None

    def test_show_on_destroyed_source_is_dropped(self, make, registry, caplog):
        notification = make(PomodoroEndNotification)
        notification.source = registry.get_or_create()
        notification.source.destroy()
        with caplog.at_level(logging.WARNING):
            notification.show()
        assert "is gone" in caplog.text
        assert not notification.destroyed


class TestShow:
    def test_show_uses_shared_source_and_end_banner(self, timer, make, tray, registry):
        timer.start()
        notification = make(PomodoroEndNotification)
        notification.show()
        assert notification.source is registry.current
        assert tray.contains(notification.source)
        assert tray.is_shown(notification)
        assert isinstance(tray.banner, EndBanner)

    def test_content_change_restarts_tray_timeout(self, timer, make, tray, clock, advance_to):
        timer.start()
        notification = make(PomodoroEndNotification)
        notification.show()
        advance_to(44)
        assert tray.expires_at == pytest.approx(clock() + 2.0)

    def test_activate_closes_calendar(self, timer, make, tray):
        timer.start()
        notification = make(PomodoroStartNotification)
        notification.show()
        tray.calendar_open = True
        notification.activate()
        assert not tray.calendar_open
        assert notification.destroyed


class TestScreenShield:
    def test_follows_phase_and_pause(self, timer, make, tray, registry):
        timer.start()
        notification = make(ScreenShieldNotification)
        assert notification.resident and not notification.transient
        assert notification.title == "Pomodoro"
        assert registry.current.title == "Pomodoro"
        assert tray.screen_wakeups == 1

        timer.pause()
        assert notification.title == "Paused"
        assert tray.screen_wakeups == 2

    def test_countdown_rounds_seconds(self, timer, make, advance_to):
        timer.start()
        notification = make(ScreenShieldNotification)
        advance_to(44)
        assert notification.body == "45 seconds remaining"

    def test_changes_refresh_source_count(self, timer, make, registry, advance_to):
        timer.start()
        notification = make(ScreenShieldNotification)
        counts = []
        registry.current.connect("count-updated", lambda s: counts.append(s.count))
        advance_to(44)
        advance_to(44)
        assert len(counts) == 1
        assert not notification.destroyed

    def test_destroy_restores_source_title(self, timer, make, registry):
        timer.start()
        notification = make(ScreenShieldNotification)
        assert registry.current.title == "Pomodoro"

        notification.destroy()
        assert registry.current.title == "Pomodoro Timer"


class TestIssueNotification:
    def test_report_issue_opens_url(self, registry, tray, opened_uris):
        notification = IssueNotification(
            "Something broke", registry=registry, open_uri=opened_uris.append,
            url="https://example.org/issues")
        notification.show()
        assert tray.is_shown(notification)
        assert notification.transient
        assert notification.urgency == Urgency.HIGH
        assert tray.banner.action_labels() == ["Report issue"]

        tray.banner.buttons[0].click()
        assert opened_uris == ["https://example.org/issues"]
        assert notification.destroyed
        assert tray.notification is None
