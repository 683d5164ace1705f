"""
Tests for logger configuration
"""
import logging
from logging.handlers import RotatingFileHandler

from config import settings
from logger import get_logger


def test_console_only_without_log_dir(monkeypatch):
    monkeypatch.setattr(settings.raw, "log_dir", "")
    logger = get_logger("tests.console_only")

    assert logger.handlers
    assert not any(isinstance(h, RotatingFileHandler) for h in logger.handlers)
    assert logger.propagate is False


def test_rotating_files_in_log_dir(monkeypatch, tmp_path):
    monkeypatch.setattr(settings.raw, "log_dir", str(tmp_path / "logs"))
    logger = get_logger("tests.with_files", log_file="exporter-test.log")

    file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
    assert {h.level for h in file_handlers} == {logging.DEBUG, logging.ERROR}
    assert (tmp_path / "logs" / "exporter-test.log").exists()
    assert (tmp_path / "logs" / "errors.log").exists()

    for handler in file_handlers:
        handler.close()
        logger.removeHandler(handler)


def test_handlers_are_not_duplicated(monkeypatch):
    monkeypatch.setattr(settings.raw, "log_dir", "")
    first = get_logger("tests.repeat")
    second = get_logger("tests.repeat")

    assert first is second
    assert len(second.handlers) == 1
