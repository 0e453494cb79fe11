import logging
import sys
from typing import Optional, Union

from amazon_pay import config

from .format import DefaultFormatter

# name of the logger all library loggers descend from
LIBRARY_LOGGER = "amazon_pay"

default_log_levels = {
    "charset_normalizer": logging.WARNING,
    "requests": logging.WARNING,
    "urllib3": logging.WARNING,
}


def parse_log_level(log_level: Union[int, str, None]) -> int:
    """
    Turns a log level given as a name (``"debug"``, ``"WARN"``, ...) or number into a logging level number.
    Unknown names fall back to DEBUG.
    """
    if log_level is None:
        return logging.DEBUG
    if isinstance(log_level, int):
        return log_level
    name = str(log_level).strip().upper()
    if name == "WARN":
        name = "WARNING"
    if name == "FATAL":
        name = "CRITICAL"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.DEBUG


def get_log_level_from_config() -> int:
    # overriding the log level if AMAZON_PAY_LOG has been set
    if config.AMAZON_PAY_LOG:
        return parse_log_level(config.AMAZON_PAY_LOG)

    return logging.DEBUG if config.DEBUG else logging.INFO


def create_default_handler(log_level: int, log_file: Optional[str] = None) -> logging.Handler:
    if log_file:
        log_handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        log_handler = logging.StreamHandler(stream=sys.stderr)
    log_handler.setLevel(log_level)
    log_handler.setFormatter(DefaultFormatter())
    return log_handler


def setup_logging_for_cli(log_level=logging.INFO):
    logging.basicConfig(level=log_level, handlers=[create_default_handler(log_level)])

    logging.root.setLevel(log_level)
    logging.getLogger(LIBRARY_LOGGER).setLevel(log_level)
    for logger, level in default_log_levels.items():
        logging.getLogger(logger).setLevel(level)


def setup_logging(log_level: Union[int, str, None] = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the ``amazon_pay`` logger. Clients and IPN handlers created with ``log_enabled=True`` call this with
    their log level and log file, applications may call it directly. Calling it again replaces the handler
    installed by the previous call, it never stacks handlers.

    :param log_level: the log level, as a number or a name like ``"DEBUG"``
    :param log_file: optional path of a file to log to, stderr is used if not set
    """
    level = parse_log_level(log_level)
    logger = logging.getLogger(LIBRARY_LOGGER)

    for handler in list(logger.handlers):
        if getattr(handler, "_amazon_pay_handler", False):
            logger.removeHandler(handler)
            handler.close()

    log_handler = create_default_handler(level, log_file)
    log_handler._amazon_pay_handler = True
    logger.addHandler(log_handler)
    logger.setLevel(level)

    for name, default_level in default_log_levels.items():
        logging.getLogger(name).setLevel(default_level)
