"""
Tests for configuration loading (notifier/config.py).
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import notifier.config as config_mod
from notifier.config import Config


@pytest.fixture()
def config_file(tmp_path: Path, monkeypatch):
    fake_file = tmp_path / "config.json"
    monkeypatch.setattr(config_mod, "_CONFIG_FILE", fake_file)
    return fake_file


class TestDefaults:
    def test_timer_defaults(self):
        cfg = Config()
        assert cfg.work_seconds == 1500.0
        assert cfg.short_break_seconds == 300.0
        assert cfg.long_break_interval == 4

    def test_notification_defaults(self):
        cfg = Config()
        assert cfg.pre_announcement_seconds == 10.0
        assert cfg.extend_seconds == 60.0
        assert cfg.minutes_threshold_seconds == 45.0
        assert cfg.notification_timeout_ms == 2000


class TestLoad:
    def test_missing_file_keeps_defaults(self, config_file):
        assert Config.load() == Config()

    def test_file_overrides(self, config_file):
        config_file.write_text(json.dumps({"work_seconds": 600, "unknown_key": 1}))
        cfg = Config.load()
        assert cfg.work_seconds == 600
        assert not hasattr(cfg, "unknown_key")

    def test_env_overrides_file(self, config_file, monkeypatch):
        config_file.write_text(json.dumps({"api_port": 9000}))
        monkeypatch.setenv("NOTIFIER_API_PORT", "9100")
        monkeypatch.setenv("NOTIFIER_EXTEND_SECONDS", "30")
        cfg = Config.load()
        assert cfg.api_port == 9100
        assert cfg.extend_seconds == 30.0

    def test_env_value_is_coerced(self, config_file, monkeypatch):
        monkeypatch.setenv("NOTIFIER_LOG_LEVEL", "debug")
        monkeypatch.setenv("NOTIFIER_SCREEN_SHIELD_ROUND_SECONDS", "10")
        cfg = Config.load()
        assert cfg.log_level == "debug"
        assert cfg.screen_shield_round_seconds == 10
