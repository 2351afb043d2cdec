from __future__ import annotations

import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from link_preview.core.config import AppConfig, AppPaths, PreviewSettings
from link_preview.core.logging_config import configure_logging
from link_preview.core.request import CachePolicy


def test_load_without_file_uses_defaults(app_dir: Path) -> None:
    cfg = AppConfig.load()
    assert cfg.paths.app_dir == app_dir
    assert cfg.preview == PreviewSettings()
    assert cfg.preview.policy is CachePolicy.ENABLED


def test_save_and_load_round_trip(app_dir: Path) -> None:
    cfg = AppConfig(
        paths=AppPaths(app_dir=app_dir),
        preview=PreviewSettings(timeout_seconds=7.5, max_cache_elements=5, cache_policy="read-only"),
    )
    cfg.save()
    loaded = AppConfig.load()
    assert loaded.preview.timeout_seconds == 7.5
    assert loaded.preview.max_cache_elements == 5
    assert loaded.preview.policy is CachePolicy.READ_ONLY


def test_unknown_keys_are_ignored(app_dir: Path) -> None:
    app_dir.mkdir(parents=True)
    (app_dir / "config.json").write_text(
        json.dumps({"preview": {"user_agent": "ua", "legacy_option": True}}), encoding="utf-8"
    )
    assert AppConfig.load().preview.user_agent == "ua"


def test_unreadable_config_falls_back_to_defaults(app_dir: Path) -> None:
    app_dir.mkdir(parents=True)
    (app_dir / "config.json").write_text("{not json", encoding="utf-8")
    assert AppConfig.load().preview == PreviewSettings()


def test_configure_logging_installs_rotating_file_handler(app_dir: Path) -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        configure_logging(AppConfig.load(), verbose=True)
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert Path(file_handlers[0].baseFilename) == app_dir / "link_preview.log"
        assert root.level == logging.DEBUG
    finally:
        for h in root.handlers:
            h.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_invalid_cache_policy_falls_back_to_defaults(app_dir: Path, caplog) -> None:
    app_dir.mkdir(parents=True)
    (app_dir / "config.json").write_text(
        json.dumps({"preview": {"timeout_seconds": 3, "cache_policy": "sometimes"}}), encoding="utf-8"
    )
    with caplog.at_level(logging.WARNING, logger="link_preview.core.config"):
        cfg = AppConfig.load()
    assert cfg.preview == PreviewSettings()
    assert "Ignoring invalid preview settings" in caplog.text


def test_settings_reject_unknown_cache_policy() -> None:
    with pytest.raises(ValueError):
        PreviewSettings(cache_policy="sometimes")
