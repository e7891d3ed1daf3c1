"""Test unified logging configuration.

Tests for blockpaint.utils.logging_config:
    - setup_logging() idempotency (no duplicated handlers or lines)
    - JSON file output carries context fields
    - push_context / pop_context / get_context / log_context
    - setup_from_config with a LoggingConfig section
    - Canvas failures are logged as warnings

Run:
    pytest tests/test_logging.py -v
"""

import json
import logging

import pytest

from blockpaint.engine.canvas import Canvas
from blockpaint.utils import logging_config
from blockpaint.utils.validators import LoggingConfig


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Remove handlers installed by a test and reset context."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(logging_config._installed_handlers):
        root.removeHandler(handler)
        handler.close()
    logging_config._installed_handlers.clear()
    logging_config.pop_context()
    root.setLevel(level)


def test_setup_is_idempotent(tmp_path):
    log_path = tmp_path / "run.log"
    kwargs = dict(log_level="INFO", log_file=str(log_path), json=True, to_stderr=False,
                  context={"canvas": "main"})

    logging_config.setup_logging(**kwargs)
    n_handlers = len(logging.getLogger().handlers)
    logger = logging_config.get_logger("blockpaint.test")
    logger.info("hello")

    result = logging_config.setup_logging(**kwargs)
    logger.info("world")

    assert len(logging.getLogger().handlers) == n_handlers
    assert len(result['handlers']) == 1

    lines = log_path.read_text().strip().splitlines()
    assert len(lines) == 2
    rec = json.loads(lines[0])
    assert rec["msg"] == "hello"
    assert rec["canvas"] == "main"
    assert rec["lvl"] == "INFO"


def test_human_format_includes_context(tmp_path):
    log_path = tmp_path / "human.log"
    logging_config.setup_logging(log_level="DEBUG", log_file=str(log_path), to_stderr=False)
    logging_config.push_context(frame=3)
    logging_config.get_logger("blockpaint.test").debug("rendered")

    line = log_path.read_text().strip()
    assert "| DEBUG" in line
    assert "frame=3 |" in line
    assert line.endswith("rendered")


def test_context_push_pop():
    logging_config.push_context(canvas="a", frame=1)
    logging_config.push_context(frame=2)
    assert logging_config.get_context() == {"canvas": "a", "frame": 2}

    logging_config.pop_context(["frame"])
    assert logging_config.get_context() == {"canvas": "a"}

    logging_config.pop_context()
    assert logging_config.get_context() == {}


def test_set_level():
    logging_config.set_level("warning")
    assert logging.getLogger().level == logging.WARNING


def test_unknown_rotation_mode(tmp_path):
    with pytest.raises(ValueError, match="rotation mode"):
        logging_config.setup_logging(log_file=str(tmp_path / "x.log"), to_stderr=False,
                                     rotate={"mode": "weekly"})


def test_canvas_error_logged(caplog):
    canvas = Canvas(4, 4)
    with caplog.at_level(logging.WARNING, logger="blockpaint.engine.canvas"):
        canvas.set_color_mode("sepia")
    assert "ParseError" in caplog.text


def test_log_context_restores():
    logging_config.push_context(canvas="a")
    with logging_config.log_context(asset="fonts/std"):
        assert logging_config.get_context() == {"canvas": "a", "asset": "fonts/std"}
    assert logging_config.get_context() == {"canvas": "a"}


def test_setup_from_config(tmp_path):
    cfg = LoggingConfig(log_level="warning", log_file=str(tmp_path / "cfg.log"), json=True)
    result = logging_config.setup_from_config(cfg, to_stderr=False)

    assert len(result['handlers']) == 1
    assert logging.getLogger().level == logging.WARNING
    logging_config.get_logger("blockpaint.test").warning("configured")
    rec = json.loads((tmp_path / "cfg.log").read_text().strip())
    assert rec["msg"] == "configured"
