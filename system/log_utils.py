import logging
import os
import sys

VERBOSE = 5
logging.addLevelName(VERBOSE, "VERBOSE")

_logger = logging.getLogger("breathcycle")


def _configure() -> None:
    if _logger.handlers:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)-7s %(message)s", "%H:%M:%S"))
    _logger.addHandler(handler)
    level = os.environ.get("BREATH_LOG_LEVEL", "INFO").upper()
    try:
        _logger.setLevel(level)
    except ValueError:
        _logger.setLevel(logging.INFO)
        _logger.warning(f"[LOG] unknown level {level!r}, falling back to INFO")
    _logger.propagate = False


def _fmt(msg: str, fields: dict) -> str:
    if not fields:
        return msg
    extra = " ".join(f"{k}={v}" for k, v in fields.items())
    return f"{msg} {extra}"


def verbose(msg: str, **fields) -> None:
    _logger.log(VERBOSE, _fmt(msg, fields))


def debug(msg: str, **fields) -> None:
    _logger.debug(_fmt(msg, fields))


def info(msg: str, **fields) -> None:
    _logger.info(_fmt(msg, fields))


def warn(msg: str, **fields) -> None:
    _logger.warning(_fmt(msg, fields))


def error(msg: str, **fields) -> None:
    _logger.error(_fmt(msg, fields))


_configure()
