"""Logging utilities for densitymesh.

Provides a consistent logger hierarchy under the ``densitymesh`` namespace
without modifying the process root logger.
"""

from __future__ import annotations

import logging
import sys

_FORMAT = logging.Formatter("%(levelname)s %(name)s: %(message)s")
_ROOT_NAME = "densitymesh"


def _ensure_package_root() -> logging.Logger:
    """Attach a single stdout handler to the package logger if it only has
    NullHandlers, and stop propagation to the process root.
    """
    root = logging.getLogger(_ROOT_NAME)
    has_real_handler = any(
        not isinstance(h, logging.NullHandler) for h in root.handlers
    )
    if not has_real_handler:
        for h in list(root.handlers):
            root.removeHandler(h)
        handler = logging.StreamHandler(stream=sys.stdout)
        handler.setFormatter(_FORMAT)
        root.addHandler(handler)
    root.propagate = False
    return root


def _to_level(level: str | int | None, default: int = logging.INFO) -> int:
    if level is None:
        return default
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else default


def configure_logging(level: str | int = "INFO") -> None:
    """Configure the ``densitymesh`` logger family level.

    This does NOT modify the process root logger.
    """
    root = _ensure_package_root()
    root.setLevel(_to_level(level))


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``densitymesh`` namespace.

    Loggers inherit their level from the package logger, so handlers are
    only attached once :func:`configure_logging` is called.
    """
    if name != _ROOT_NAME and not name.startswith(_ROOT_NAME + "."):
        name = f"{_ROOT_NAME}.{name}"
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
