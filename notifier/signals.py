"""
Signals — synchronous publish/subscribe plus an idle queue.

EventEmitter mirrors the connect/disconnect/emit surface the timer and the
tray objects share. Handlers run to completion in connection order; one
failing handler is logged and does not break the emit cycle.

IdleQueue runs callbacks after the current batch of events has been
handled. Bound to an asyncio loop it schedules itself with call_soon;
unbound, callbacks wait for run_pending().
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, List, Optional

__all__ = [
    "EventEmitter",
    "IdleHandle",
    "IdleQueue",
    "Subscription",
]

logger = logging.getLogger(__name__)


@dataclass
class Subscription:
    event: str
    handler: Callable[..., Any]
    active: bool = True

    def cancel(self) -> None:
        self.active = False


class EventEmitter:

    def __init__(self) -> None:
        self._subs: Dict[str, List[Subscription]] = {}

    # ------------------------------------------------------------------
    # Subscription management
    # ------------------------------------------------------------------

    def connect(self, event: str, handler: Callable[..., Any]) -> Subscription:
        sub = Subscription(event=event, handler=handler)
        self._subs.setdefault(event, []).append(sub)
        return sub

    def disconnect(self, sub: Optional[Subscription]) -> None:
        if sub is None or not sub.active:
            return
        sub.cancel()
        bucket = self._subs.get(sub.event)
        if not bucket:
            return
        for i, existing in enumerate(bucket):
            if existing is sub:
                bucket.pop(i)
                break
        if not bucket:
            self._subs.pop(sub.event, None)

    def disconnect_all(self) -> None:
        for bucket in self._subs.values():
            for sub in bucket:
                sub.cancel()
        self._subs.clear()

    def handler_count(self, event: str) -> int:
        return len(self._subs.get(event, ()))

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def emit(self, event: str, *args: Any) -> None:
        # Snapshot first so handlers can connect/disconnect while we dispatch
        for sub in list(self._subs.get(event, ())):
            if not sub.active:
                continue
            try:
                sub.handler(self, *args)
            except Exception:
                logger.exception("Handler for %r on %s failed", event, type(self).__name__)


@dataclass
class IdleHandle:
    callback: Callable[[], Any]
    name: str = ""
    cancelled: bool = False


class IdleQueue:
    """
    Deferred callbacks that run once the current event batch has drained.

    Callbacks added while the queue is draining run on the next drain.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop
        self._pending: Deque[IdleHandle] = deque()

    def bind(self, loop: Optional[asyncio.AbstractEventLoop]) -> None:
        self._loop = loop
        if loop is not None and self._pending:
            loop.call_soon(self.run_pending)

    def idle_add(self, callback: Callable[[], Any], name: str = "") -> IdleHandle:
        handle = IdleHandle(callback=callback, name=name)
        self._pending.append(handle)
        if self._loop is not None:
            self._loop.call_soon(self.run_pending)
        return handle

    def remove(self, handle: Optional[IdleHandle]) -> None:
        if handle is not None:
            handle.cancelled = True

    def __len__(self) -> int:
        return sum(1 for h in self._pending if not h.cancelled)

    def run_pending(self) -> int:
        """Run callbacks queued so far; return how many ran."""
        batch = list(self._pending)
        self._pending.clear()
        ran = 0
        for handle in batch:
            if handle.cancelled:
                continue
            handle.cancelled = True
            try:
                handle.callback()
            except Exception:
                logger.exception("Idle callback %s failed", handle.name or handle.callback)
            ran += 1
        return ran
