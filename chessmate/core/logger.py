"""Logger configuration shared by all layers."""

import logging
import sys

_DEFAULT_LOGGER_NAME = "chessmate"
_DEFAULT_FORMATTER = logging.Formatter(
    "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
)


def _configure_root_logger(level: int | str) -> logging.Logger:
    """Attach a single stdout handler to the package logger. Child loggers propagate into this one."""
    root = logging.getLogger(_DEFAULT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(_DEFAULT_FORMATTER)
        root.addHandler(handler)
        root.propagate = False
    if root.level == logging.NOTSET:
        root.setLevel(level)
    return root


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a logger below the package logger.

    ex) get_logger(__name__) inside chessmate/chess/game.py --> logger named "chessmate.chess.game"
    """
    from chessmate.core.config import load_settings

    _configure_root_logger(load_settings().log_level)
    if name is None or name == _DEFAULT_LOGGER_NAME:
        return logging.getLogger(_DEFAULT_LOGGER_NAME)
    if not name.startswith(f"{_DEFAULT_LOGGER_NAME}."):
        name = f"{_DEFAULT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)
