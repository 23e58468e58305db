from __future__ import annotations

import logging
from io import StringIO

from timecard_sync.logging.init import (
    LOGGER_NAME,
    SUMMARY_LEVEL,
    LabeledFormatter,
    get_logger,
    log_summary,
    reset_logging,
    set_debug,
    setup_logging,
)


def test_setup_logging_is_idempotent(clean_logging):
    logger = setup_logging()
    assert logger.name == LOGGER_NAME
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert setup_logging() is logger
    assert get_logger() is logger
    assert len(logger.handlers) == 1


def test_labeled_prefixes():
    """INFO|WARN|ERROR|SUMMARY のラベルで出力される."""
    stream = StringIO()
    logger = logging.getLogger("test_timecard_sync_labels")
    logger.setLevel(logging.INFO)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    handler = logging.StreamHandler(stream)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    logger.propagate = False

    logger.info("info message")
    logger.warning("warn message")
    logger.error("error message")
    logger.log(SUMMARY_LEVEL, "items=1")

    assert stream.getvalue().splitlines() == [
        "INFO info message",
        "WARN warn message",
        "ERROR error message",
        "SUMMARY items=1",
    ]


def test_engine_module_logs_share_the_handler(clean_logging, capsys):
    setup_logging()
    logging.getLogger("timecard_sync.services.capacity").warning("row count did not grow")
    log_summary("items=0")
    out = capsys.readouterr().out
    assert "WARN row count did not grow" in out
    assert "SUMMARY items=0" in out


def test_set_debug_lowers_handler_levels(clean_logging, capsys):
    logger = setup_logging()
    set_debug(logger)
    logging.getLogger("timecard_sync.services.reconciler").debug("plan matched=1")
    assert "DEBUG plan matched=1" in capsys.readouterr().out


def test_reset_logging_restores_propagation(clean_logging):
    logger = setup_logging()
    reset_logging()
    assert logger.handlers == []
    assert logger.propagate is True
