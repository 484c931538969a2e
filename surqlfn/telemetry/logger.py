"""Logging for the loader, code generator and CLI.

Every module logs under the ``surqlfn`` logger.  The first :func:`get_logger`
call applies ``configs/logging.yaml`` through :func:`logging.config.dictConfig`;
without that file a single stderr handler at ``WARNING`` is installed.
"""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path
from threading import RLock
from typing import Any

from surqlfn.utils.config import load_config

ROOT_LOGGER = "surqlfn"
LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "configs" / "logging.yaml"

_CONFIG_LOCK = RLock()
_CONFIGURED = False


def logging_config(path: str | Path = LOGGING_CONFIG_PATH) -> dict[str, Any]:
    """Return the dictConfig mapping stored at ``path``, or the stderr fallback."""

    config_path = Path(path)
    if config_path.exists():
        return load_config(config_path)
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"plain": {"format": "%(levelname)s %(name)s: %(message)s"}},
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": "plain",
            }
        },
        "loggers": {
            ROOT_LOGGER: {"level": "WARNING", "handlers": ["stderr"], "propagate": False}
        },
    }


def configure() -> None:
    """Apply the logging configuration once per process."""

    global _CONFIGURED
    with _CONFIG_LOCK:
        if _CONFIGURED:
            return
        logging.config.dictConfig(logging_config())
        _CONFIGURED = True


def set_level(level: str | int) -> None:
    """Adjust the ``surqlfn`` logger level (used by ``--log-level``)."""

    configure()
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"unknown log level {level!r}")
        level = resolved
    logging.getLogger(ROOT_LOGGER).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``surqlfn`` logger, configuring logging on first use."""

    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        raise ValueError(f"logger name must live under {ROOT_LOGGER!r}, got {name!r}")
    configure()
    return logging.getLogger(name)


__all__ = ["LOGGING_CONFIG_PATH", "ROOT_LOGGER", "configure", "get_logger", "logging_config", "set_level"]
