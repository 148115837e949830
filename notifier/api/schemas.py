"""
Pydantic schemas for the local host API.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

# ── Timer ──────────────────────────────────────────────────────────────────

class TimerStateOut(BaseModel):
    phase: str
    label: str
    paused: bool
    elapsed_seconds: float
    remaining_seconds: float
    duration_seconds: float
    sessions_completed: int


# ── Notifications ──────────────────────────────────────────────────────────

class NotificationOut(BaseModel):
    id: int
    kind: Optional[str] = Field(None, description="start | end | screen_shield; None for plain notifications")
    state: Optional[str] = None
    title: str
    body: Optional[str]
    urgency: str
    resident: bool
    transient: bool
    shown: bool


class SourceOut(BaseModel):
    title: str
    icon_name: str
    count: int


class NotificationListOut(BaseModel):
    source: Optional[SourceOut]
    notifications: List[NotificationOut]


class IssueIn(BaseModel):
    message: str = Field(..., min_length=1)


# ── Tray ───────────────────────────────────────────────────────────────────

class BannerOut(BaseModel):
    notification_id: int
    title: str
    body: Optional[str]
    expanded: bool
    actions: List[str]


class TrayStateOut(BaseModel):
    tray_mode_active: bool
    do_not_disturb_visible: bool
    auto_expand_suppressed: bool
    message_banners_overridden: bool
    screen_locked: bool
    banner: Optional[BannerOut]


class ScreenLockIn(BaseModel):
    locked: bool
