"""Logging utilities.

Purpose:
    Centralize logging configuration for the package.

Key responsibilities:
    - Provide a helper to obtain package loggers.
    - Allow an optional verbose mode for the command line.

Notes/Edge cases:
    - Configuration is idempotent; calling it again replaces the stderr
      handler instead of adding a second one.
"""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = "chunkeval"

_root = logging.getLogger(ROOT_LOGGER_NAME)
if not any(isinstance(h, logging.NullHandler) for h in _root.handlers):
    _root.addHandler(logging.NullHandler())

_cli_handler: logging.Handler | None = None


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the ``chunkeval`` namespace for ``name``."""

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Route package records to stderr at WARNING, or DEBUG when ``verbose``."""

    global _cli_handler

    level = logging.DEBUG if verbose else logging.WARNING
    if _cli_handler is not None:
        _root.removeHandler(_cli_handler)
    _cli_handler = logging.StreamHandler()
    _cli_handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    _cli_handler.setLevel(level)
    _root.addHandler(_cli_handler)
    _root.setLevel(level)
    return _root


__all__ = ["ROOT_LOGGER_NAME", "get_logger", "configure_logging"]
