"""Logging setup shared by the API process and the health monitor."""
from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_DIR = Path(os.getenv("LOG_DIR", str(Path(__file__).parent.parent / "logs")))
LOG_LEVEL = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)

FILE_FORMAT = "%(asctime)s [%(name)s] [%(levelname)s] %(message)s"
CONSOLE_FORMAT = "%(asctime)s %(levelname).1s [%(name)s] %(message)s"

_configured_loggers: set[str] = set()


def _handler(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def setup_logger(name: str, filename: str) -> logging.Logger:
    """Attach a file handler under LOG_DIR and a console handler to ``name``.

    Calling it again for the same name returns the logger untouched. Child
    loggers (``designetica.client.*`` and so on) reach these handlers through
    normal propagation; the configured logger itself does not propagate to root.
    """
    logger = logging.getLogger(name)
    if name in _configured_loggers:
        return logger

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    logger.setLevel(LOG_LEVEL)
    logger.propagate = False
    logger.addHandler(_handler(logging.FileHandler(LOG_DIR / filename, encoding="utf-8"), FILE_FORMAT))
    logger.addHandler(_handler(logging.StreamHandler(), CONSOLE_FORMAT))

    _configured_loggers.add(name)
    return logger


def get_api_logger() -> logging.Logger:
    return setup_logger("designetica", "api.log")


def get_monitor_logger() -> logging.Logger:
    return setup_logger("designetica.monitor", "monitor.log")


def mask_secret(value: str, visible: int = 6) -> str:
    """First ``visible`` characters of a secret followed by ``***``."""
    if not value:
        return ""
    return value[:visible] + "***"
