"""
logging.py

Логування для itersolve.

Усі логери пакета мають імена виду "itersolve.<модуль>", пишуть у stderr
у форматі "[LEVEL] name: message" і за замовчуванням показують лише WARNING.
"""

from __future__ import annotations

import logging
import sys
from typing import Dict, Optional, Union

_DEFAULT_LEVEL = logging.WARNING
_DEFAULT_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
_format: str = _DEFAULT_FORMAT
_stream: Optional[object] = None

# Кеш логерів, щоб не дублювати handler-и
_loggers: Dict[str, logging.Logger] = {}


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        return getattr(logging, level.upper(), logging.WARNING)
    return level


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Отримати (або створити) логер пакета.

    Parameters
    ----------
    name : Optional[str]
        Зазвичай __name__ модуля. Якщо None — кореневий логер "itersolve".
    """
    if name is None:
        name = "itersolve"

    logger_name = name if name.startswith("itersolve") else f"itersolve.{name}"

    if logger_name in _loggers:
        return _loggers[logger_name]

    logger = logging.getLogger(logger_name)

    if not logger.handlers:
        logger.setLevel(_DEFAULT_LEVEL)

        handler = logging.StreamHandler(_stream or sys.stderr)
        handler.setLevel(_DEFAULT_LEVEL)
        handler.setFormatter(logging.Formatter(_format))

        logger.addHandler(handler)
        logger.propagate = False

    _loggers[logger_name] = logger
    return logger


def set_log_level(level: Union[int, str]) -> None:
    """
    Змінити рівень логування для всіх логерів itersolve
    (logging.DEBUG, "INFO", ...).
    """
    global _DEFAULT_LEVEL

    level = _resolve_level(level)

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _DEFAULT_LEVEL = level


def configure_logging(
    level: Union[int, str] = logging.WARNING,
    format_string: Optional[str] = None,
    stream: Optional[object] = None,
) -> None:
    """
    Переналаштувати логування: рівень, формат і потік виводу.

    Замінює handler-и всіх уже створених логерів; нові логери отримають
    той самий рівень, формат і потік.
    """
    global _DEFAULT_LEVEL, _format, _stream

    level = _resolve_level(level)
    formatter = logging.Formatter(format_string or _DEFAULT_FORMAT)

    if stream is None:
        stream = sys.stderr

    for logger in _loggers.values():
        logger.setLevel(level)
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        handler = logging.StreamHandler(stream)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    _DEFAULT_LEVEL = level
    _format = format_string or _DEFAULT_FORMAT
    _stream = stream


__all__ = [
    "get_logger",
    "set_log_level",
    "configure_logging",
]
