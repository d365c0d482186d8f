"""Tests for application config persistence and coordinator options."""

import json
import logging

import pytest

from app.config import Config
from domain.models import LoadingConfig, MessageContext, Priority


def test_defaults_map_to_loading_config():
    lc = Config().loading_config()
    assert lc.min_loading_time == 300.0
    assert lc.max_loading_time == 10000.0
    assert lc.debounce_ms == 50.0
    assert lc.enable_skeleton_fallback is True
    assert lc.priority is Priority.NORMAL
    assert lc.message_context is MessageContext.GENERAL
    assert lc.burst_threshold == 10
    assert lc.stability_ms == 100.0


def test_message_context_override():
    lc = Config().loading_config("appointment")
    assert lc.message_context is MessageContext.APPOINTMENT


def test_save_and_load(tmp_path):
    path = tmp_path / "config.json"
    cfg = Config(min_loading_time_ms=500.0, locale="en")
    cfg.save(path)

    loaded = Config.load(path)
    assert loaded.min_loading_time_ms == 500.0
    assert loaded.locale == "en"


def test_missing_file_gives_defaults(tmp_path):
    assert Config.load(tmp_path / "nope.json") == Config()


def test_unknown_keys_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"debounce_ms": 80, "camera_index": 3}), encoding="utf-8")
    loaded = Config.load(path)
    assert loaded.debounce_ms == 80
    assert not hasattr(loaded, "camera_index")


def test_corrupt_file_falls_back(tmp_path, caplog):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    with caplog.at_level(logging.WARNING):
        loaded = Config.load(path)
    assert loaded == Config()
    assert "Could not load config" in caplog.text


@pytest.mark.parametrize(
    "kwargs",
    [
        {"min_loading_time": -1},
        {"min_loading_time": 500, "max_loading_time": 400},
        {"burst_threshold": 0},
        {"priority": "urgent"},
    ],
)
def test_invalid_loading_config_rejected(kwargs):
    with pytest.raises(ValueError):
        LoadingConfig(**kwargs)
