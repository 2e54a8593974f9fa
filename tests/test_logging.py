from __future__ import annotations

import logging
from pathlib import Path

import pytest

from survey_benchmarks.logging_config import configure_logging


def test_configure_logging_adds_stream_handler(restore_root_logging: None) -> None:
    configure_logging(None)
    root = logging.getLogger()
    assert any(isinstance(h, logging.StreamHandler) for h in root.handlers)
    assert root.level == logging.INFO


def test_configure_logging_writes_file(tmp_path: Path, restore_root_logging: None) -> None:
    log_path = tmp_path / "logs" / "engine.log"
    configure_logging(log_path, "debug")

    logging.getLogger("survey_benchmarks.test").debug("hello %s", "file")
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert "hello file" in log_path.read_text(encoding="utf-8")


def test_configure_logging_rejects_unknown_level_name() -> None:
    with pytest.raises(ValueError):
        configure_logging(None, "chatty")
