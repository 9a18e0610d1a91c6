"""Tests for deadlint.logging."""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Iterator

import pytest

from deadlint.logging import configure_logging, get_logger


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    yield
    logger = logging.getLogger("deadlint")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_get_logger_uses_package_hierarchy() -> None:
    assert get_logger("engine.sweep").name == "deadlint.engine.sweep"
    assert get_logger().name == "deadlint"


def test_console_levels() -> None:
    stream = io.StringIO()
    configure_logging(stream=stream)
    get_logger("test").debug("hidden")
    get_logger("test").info("shown")

    assert stream.getvalue() == "[deadlint] INFO shown\n"

    stream = io.StringIO()
    configure_logging(verbose=True, stream=stream)
    get_logger("test").debug("detail")
    assert "[deadlint] DEBUG detail" in stream.getvalue()

    stream = io.StringIO()
    configure_logging(quiet=True, stream=stream)
    get_logger("test").info("hidden")
    get_logger("test").warning("careful")
    assert stream.getvalue() == "[deadlint] WARNING careful\n"


def test_reconfiguring_replaces_handlers() -> None:
    configure_logging(stream=io.StringIO())
    logger = configure_logging(stream=io.StringIO())

    assert len(logger.handlers) == 1


def test_log_file_keeps_debug_output(tmp_path: Path) -> None:
    log_file = tmp_path / "deadlint.log"
    stream = io.StringIO()
    configure_logging(quiet=True, log_file=log_file, stream=stream)

    get_logger("test").debug("only in file")
    for handler in logging.getLogger("deadlint").handlers:
        handler.flush()

    assert stream.getvalue() == ""
    assert "only in file" in log_file.read_text(encoding="utf-8")
