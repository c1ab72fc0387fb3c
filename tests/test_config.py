"""Tests for environment overrides in the config module."""

import importlib

from holiday_calendar import config


def test_placeholder_label_default():
    assert config.PLACEHOLDER_LABEL == "祝日"


def test_placeholder_label_from_environment(monkeypatch):
    monkeypatch.setenv("PLACEHOLDER_LABEL", "Holiday")
    try:
        assert importlib.reload(config).PLACEHOLDER_LABEL == "Holiday"
    finally:
        monkeypatch.delenv("PLACEHOLDER_LABEL")
        importlib.reload(config)
    assert config.PLACEHOLDER_LABEL == "祝日"
