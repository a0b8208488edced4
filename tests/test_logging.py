import logging

import pytest
from pythonjsonlogger.json import JsonFormatter
from rich.logging import RichHandler

from skein.utils import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    monkeypatch.delenv("SKEIN_LOG_MODE", raising=False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_cli_mode_uses_rich():
    setup_logging(mode="cli", console_log_level=logging.INFO)
    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0], RichHandler)
    assert root.handlers[0].level == logging.INFO
    assert root.level == logging.DEBUG


def test_json_mode_uses_json_formatter():
    setup_logging(mode="json")
    handler = logging.getLogger().handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, JsonFormatter)
    assert handler.level == logging.WARNING


def test_mode_from_environment(monkeypatch):
    monkeypatch.setenv("SKEIN_LOG_MODE", "json")
    setup_logging()
    assert isinstance(logging.getLogger().handlers[0].formatter, JsonFormatter)


def test_invalid_mode():
    with pytest.raises(ValueError, match="Invalid log mode"):
        setup_logging(mode="xml")


def test_file_logging(tmp_path):
    log_file = tmp_path / "skein.log"
    setup_logging(mode="cli", log_filename=str(log_file))
    handlers = logging.getLogger().handlers
    file_handler = next(h for h in handlers if isinstance(h, logging.FileHandler))
    assert file_handler.level == logging.DEBUG
    assert not isinstance(file_handler.formatter, JsonFormatter)

    logging.getLogger("skein").debug("written to file")
    file_handler.flush()
    assert "written to file" in log_file.read_text()


def test_json_file_logging(tmp_path):
    setup_logging(mode="cli", log_filename=str(tmp_path / "skein.log"), json_log_to_file=True)
    handlers = logging.getLogger().handlers
    file_handler = next(h for h in handlers if isinstance(h, logging.FileHandler))
    assert isinstance(file_handler.formatter, JsonFormatter)
