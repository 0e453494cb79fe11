import logging

import pytest

from amazon_pay import config
from amazon_pay.logging.setup import (
    LIBRARY_LOGGER,
    get_log_level_from_config,
    parse_log_level,
    setup_logging,
)


@pytest.fixture
def library_logger():
    logger = logging.getLogger(LIBRARY_LOGGER)
    handlers, level = list(logger.handlers), logger.level
    yield logger
    for handler in list(logger.handlers):
        if handler not in handlers:
            logger.removeHandler(handler)
            handler.close()
    logger.setLevel(level)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("DEBUG", logging.DEBUG),
        ("info", logging.INFO),
        ("warn", logging.WARNING),
        ("fatal", logging.CRITICAL),
        (logging.ERROR, logging.ERROR),
        (None, logging.DEBUG),
        ("unknown", logging.DEBUG),
    ],
)
def test_parse_log_level(value, expected):
    assert parse_log_level(value) == expected


def test_get_log_level_from_config(monkeypatch):
    monkeypatch.setattr(config, "AMAZON_PAY_LOG", "error")
    assert get_log_level_from_config() == logging.ERROR

    monkeypatch.setattr(config, "AMAZON_PAY_LOG", False)
    monkeypatch.setattr(config, "DEBUG", False)
    assert get_log_level_from_config() == logging.INFO


def test_setup_logging_replaces_handler(library_logger):
    before = len(library_logger.handlers)

    setup_logging("INFO")
    setup_logging("DEBUG")

    assert len(library_logger.handlers) == before + 1
    assert library_logger.level == logging.DEBUG
    assert logging.getLogger("urllib3").level == logging.WARNING


def test_setup_logging_to_file(library_logger, tmp_path):
    log_file = tmp_path / "amazon_pay.log"
    setup_logging("DEBUG", str(log_file))

    logging.getLogger("amazon_pay.client").debug("calling MWS")
    for handler in library_logger.handlers:
        handler.flush()

    assert "calling MWS" in log_file.read_text()
