"""Tests for logging configuration."""

import logging

import pytest

from feedprops.utils.logging import configure_logging, get_logger


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("feedprops").setLevel(logging.NOTSET)


def test_file_output(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "feedprops.log"
    configure_logging(level="INFO", output="file", file_path=str(log_file), log_format="json")

    get_logger("feedprops.tests").info("hello %s", "world")
    for handler in restore_root_logger.handlers:
        handler.flush()

    text = log_file.read_text(encoding="utf-8")
    assert '"level": "INFO"' in text
    assert "hello world" in text


def test_stream_output_replaces_handlers(restore_root_logger):
    configure_logging(level="DEBUG", output="stderr", log_format="text", module="feedprops")
    assert len(restore_root_logger.handlers) == 1
    assert restore_root_logger.level == logging.DEBUG
    assert logging.getLogger("feedprops").level == logging.DEBUG
