"""Tests for setup_logging()."""

import logging
from logging.handlers import RotatingFileHandler

import colorlog
import pytest

from jellyfin_api.logger import setup_logging


@pytest.fixture
def bare_logger():
    """A standalone logger without handlers or parents."""
    logger = logging.Logger("jellyfin-test")
    yield logger
    for handler in logger.handlers:
        handler.close()


@pytest.fixture(autouse=True)
def restore_httpx_level():
    httpx_logger = logging.getLogger("httpx")
    saved_level = httpx_logger.level
    yield
    httpx_logger.setLevel(saved_level)


def test_console_handler_uses_colorlog(bare_logger, monkeypatch):
    monkeypatch.delenv("JELLYFIN_LOG_FILE", raising=False)
    monkeypatch.setenv("JELLYFIN_LOG_LEVEL", "warning")

    setup_logging(bare_logger)

    assert bare_logger.level == logging.WARNING
    assert len(bare_logger.handlers) == 1
    assert isinstance(bare_logger.handlers[0].formatter, colorlog.ColoredFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_file_handler_when_configured(bare_logger, monkeypatch, tmp_path):
    log_file = tmp_path / "jellyfin.log"
    monkeypatch.setenv("JELLYFIN_LOG_FILE", str(log_file))
    monkeypatch.setenv("JELLYFIN_LOG_LEVEL", "DEBUG")

    setup_logging(bare_logger)

    file_handlers = [h for h in bare_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(log_file)


def test_existing_handlers_are_kept(bare_logger, monkeypatch):
    monkeypatch.delenv("JELLYFIN_LOG_FILE", raising=False)
    monkeypatch.delenv("JELLYFIN_LOG_LEVEL", raising=False)
    existing = logging.NullHandler()
    bare_logger.addHandler(existing)

    setup_logging(bare_logger)

    assert bare_logger.handlers == [existing]
    assert bare_logger.level == logging.INFO
