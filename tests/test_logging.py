import logging
import os
import sys
from logging.handlers import RotatingFileHandler

import pytest
from flask import Flask

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from stockroom.utils.logging import RequestIdFilter, configure_logging


@pytest.fixture
def root_logger(monkeypatch):
    root = logging.getLogger()
    monkeypatch.setattr(root, "handlers", [])
    monkeypatch.setattr(root, "level", root.level)
    yield root
    for handler in root.handlers:
        handler.close()


def _stdout_handlers(logger):
    return [
        handler
        for handler in logger.handlers
        if type(handler) is logging.StreamHandler and handler.stream is sys.stdout
    ]


def test_stdout_handler_added_next_to_existing_file_handler(root_logger, tmp_path):
    root_logger.addHandler(RotatingFileHandler(tmp_path / "other.log"))

    assert configure_logging(Flask(__name__)) is None

    handlers = _stdout_handlers(root_logger)
    assert len(handlers) == 1
    assert any(isinstance(f, RequestIdFilter) for f in handlers[0].filters)


def test_configure_logging_is_idempotent(root_logger, tmp_path):
    app = Flask(__name__)
    app.config["LOG_DIR"] = str(tmp_path / "logs")

    first = configure_logging(app)
    second = configure_logging(app)

    assert first == second == tmp_path / "logs" / "stockroom.log"
    assert len(_stdout_handlers(root_logger)) == 1
    file_handlers = [h for h in root_logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
