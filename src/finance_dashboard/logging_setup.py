"""Centralized logging configuration for the ``finance_dashboard`` package.

Entrypoints (the CLI) call ``configure_logging`` once at startup. Library
modules only call ``get_logger(__name__)`` and never attach handlers of their
own.
"""
import logging
import os
import sys
from typing import IO, Optional, Union

_PKG_LOGGER_NAME = "finance_dashboard"
LOG_LEVEL_ENV = "FINANCE_DASHBOARD_LOG_LEVEL"
_CONFIGURED = False


def _level_from_value(value: Union[int, str]) -> Optional[int]:
    if isinstance(value, int):
        return value
    value = value.strip().upper()
    if value.isdigit():
        return int(value)
    numeric = getattr(logging, value, None)
    return numeric if isinstance(numeric, int) else None


def _parse_level(level: Optional[Union[int, str]]) -> int:
    if level is not None:
        parsed = _level_from_value(level)
        if parsed is not None:
            return parsed
    # Env override when explicit level is missing or unknown
    env_val = os.getenv(LOG_LEVEL_ENV)
    if env_val:
        parsed = _level_from_value(env_val)
        if parsed is not None:
            return parsed
    return logging.WARNING


def configure_logging(
    level: Optional[Union[int, str]] = None,
    *,
    fmt: Optional[str] = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """
    Configure the package root logger exactly once.

    Args:
        level: Logging level as int or level name. If None, falls back to
            the FINANCE_DASHBOARD_LOG_LEVEL environment variable, then WARNING.
        fmt: Optional format string.
        stream: Output stream for the single StreamHandler.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)

    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(
        logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s")
    )

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, attaching a NullHandler to the package root until configured."""
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _CONFIGURED and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
