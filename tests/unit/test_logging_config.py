"""Tests for gutenberg_ci_sync/utils/logging_config.py."""

import json

import pytest
import structlog

from gutenberg_ci_sync.utils.logging_config import configure_logging


def test_json_output(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("INFO", "json")

    structlog.get_logger("test").info("mirror_not_found", branch="automated-gutenberg-update/for-pr-1")

    entry = json.loads(capsys.readouterr().out.strip())
    assert entry["event"] == "mirror_not_found"
    assert entry["branch"] == "automated-gutenberg-update/for-pr-1"
    assert entry["level"] == "info"
    assert "timestamp" in entry


def test_level_filtering(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("warning", "json")

    log = structlog.get_logger("test")
    log.info("hidden")
    log.warning("shown")

    lines = capsys.readouterr().out.strip().splitlines()
    assert [json.loads(line)["event"] for line in lines] == ["shown"]


def test_console_output(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging("DEBUG", "console")

    structlog.get_logger("test").debug("dispatch_response", status_code=204)

    out = capsys.readouterr().out
    assert "dispatch_response" in out
    assert "status_code" in out
