"""Tests for configuration defaults and environment overrides."""

from __future__ import annotations

import logging

import pytest

from aclaudit.config import DEFAULT_MAX_DEPTH, DEFAULT_RENDER_MODE, RENDER_MODES, get_log_level


def test_defaults():
    assert DEFAULT_RENDER_MODE == "NestedTable"
    assert RENDER_MODES == ("NestedTable", "FlatTable")
    assert DEFAULT_MAX_DEPTH >= 2**31 - 1


def test_log_level_default(monkeypatch):
    monkeypatch.delenv("ACLAUDIT_LOG_LEVEL", raising=False)
    assert get_log_level() == logging.INFO


def test_log_level_from_env(monkeypatch):
    monkeypatch.setenv("ACLAUDIT_LOG_LEVEL", "debug")
    assert get_log_level() == logging.DEBUG


def test_override_beats_env(monkeypatch):
    monkeypatch.setenv("ACLAUDIT_LOG_LEVEL", "DEBUG")
    assert get_log_level("warning") == logging.WARNING


def test_unknown_level_fails_closed(monkeypatch):
    monkeypatch.setenv("ACLAUDIT_LOG_LEVEL", "chatty")
    with pytest.raises(RuntimeError):
        get_log_level()
