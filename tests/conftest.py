"""
Shared pytest fixtures and configuration.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from notifier.api.app import create_app
from notifier.notifications.policy import NotificationContentPolicy
from notifier.notifications.service import NotificationService
from notifier.notifications.source import NotificationSourceRegistry
from notifier.notifications.tray import MessageTray
from notifier.signals import IdleQueue
from notifier.timer import PomodoroTimer


class FakeClock:
    """Manually advanced replacement for time.time()."""

    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def timer(clock):
    return PomodoroTimer(clock=clock)


@pytest.fixture()
def idle():
    """Unbound idle queue; tests drain it with run_pending()."""
    return IdleQueue()


@pytest.fixture()
def tray(clock):
    return MessageTray(transient_timeout_ms=4000, clock=clock)


@pytest.fixture()
def policy():
    return NotificationContentPolicy(
        pre_announcement_seconds=10.0,
        minutes_threshold_seconds=45.0,
        screen_shield_round_seconds=15,
    )


@pytest.fixture()
def registry(tray, idle):
    return NotificationSourceRegistry(tray, idle)


@pytest.fixture()
def opened_uris():
    return []


@pytest.fixture()
def service(timer, tray, idle, policy, opened_uris):
    svc = NotificationService(timer, tray, idle, policy=policy, open_uri=opened_uris.append)
    yield svc
    svc.destroy()


@pytest.fixture()
def advance_to(timer, clock):
    """advance_to(remaining): move the clock so the phase has `remaining` seconds left, then tick."""
    def _advance(remaining: float) -> None:
        clock.advance(timer.get_remaining() - remaining)
        timer.tick()
    return _advance


@pytest.fixture()
def app():
    """Create a fresh app instance per test."""
    return create_app()


@pytest_asyncio.fixture()
async def client(app):
    """Async HTTP client wired directly to the ASGI app (no server needed)."""
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test"
        ) as ac:
            yield ac
