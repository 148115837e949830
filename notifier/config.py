"""
Central configuration for the Pomodoro notifier.
All values can be overridden via environment variables or a local config.json.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path

_ROOT = Path(__file__).parent.parent
_CONFIG_FILE = _ROOT / "config.json"


@dataclass
class Config:
    # Host adapter
    api_host: str = "127.0.0.1"
    api_port: int = 8766
    tick_interval_ms: int = 1000             # how often the timer emits "update"

    # Timer
    work_seconds: float = 1500.0             # 25 min default
    short_break_seconds: float = 300.0       # 5 min short break
    long_break_seconds: float = 1200.0       # 20 min long break
    long_break_interval: int = 4             # work phases per long break

    # Notifications
    pre_announcement_seconds: float = 10.0   # urgency stays CRITICAL inside this window
    extend_seconds: float = 60.0             # "+1 Minute"
    minutes_threshold_seconds: float = 45.0  # countdown switches to seconds below this
    screen_shield_round_seconds: int = 15
    notification_timeout_ms: int = 2000      # timeout after a content change
    transient_timeout_ms: int = 4000         # host expiry for transient notifications
    source_title: str = "Pomodoro Timer"
    icon_name: str = "gnome-pomodoro-symbolic"
    bug_report_url: str = "https://github.com/gnome-pomodoro/gnome-pomodoro/issues"

    # Logging
    log_level: str = "INFO"

    @classmethod
    def load(cls) -> "Config":
        cfg = cls()
        if _CONFIG_FILE.exists():
            overrides = json.loads(_CONFIG_FILE.read_text())
            for k, v in overrides.items():
                if hasattr(cfg, k):
                    setattr(cfg, k, v)
        # environment variable overrides (NOTIFIER_*)
        for k in cfg.__dataclass_fields__:  # type: ignore[attr-defined]
            env_key = f"NOTIFIER_{k.upper()}"
            if env_key in os.environ:
                setattr(cfg, k, type(getattr(cfg, k))(os.environ[env_key]))
        return cfg


# Module-level singleton
config = Config.load()
