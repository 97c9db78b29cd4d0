"""Severity levels and the threshold rule used to build accepted-level lists."""

import enum
import logging


class Level(enum.IntEnum):
    DEBUG = 10
    INFO = 20
    WARN = 30
    ERROR = 40
    FATAL = 50
    PANIC = 60


ALL_LEVELS: tuple[Level, ...] = (
    Level.DEBUG,
    Level.INFO,
    Level.WARN,
    Level.ERROR,
    Level.FATAL,
    Level.PANIC,
)

_ALIASES = {
    "WARNING": Level.WARN,
    "CRITICAL": Level.FATAL,
}


def level_threshold(level: Level) -> list[Level]:
    """Return every level at or above *level*, in ALL_LEVELS order."""
    for i, candidate in enumerate(ALL_LEVELS):
        if candidate == level:
            return list(ALL_LEVELS[i:])
    return []


def parse_level(name: str) -> Level:
    """Parse a level name such as 'info' or 'WARNING'."""
    key = name.strip().upper()
    if key in _ALIASES:
        return _ALIASES[key]
    try:
        return Level[key]
    except KeyError:
        raise ValueError(f"Unknown log level: {name!r}") from None


def from_logging_level(levelno: int) -> Level:
    """Map a stdlib logging level number onto the nearest Level at or below it."""
    if levelno > logging.CRITICAL:
        return Level.PANIC
    if levelno >= logging.CRITICAL:
        return Level.FATAL
    if levelno >= logging.ERROR:
        return Level.ERROR
    if levelno >= logging.WARNING:
        return Level.WARN
    if levelno >= logging.INFO:
        return Level.INFO
    return Level.DEBUG


def to_logging_level(level: Level) -> int:
    """Map a Level back onto the stdlib numeric scale."""
    if level >= Level.FATAL:
        return logging.CRITICAL
    return {
        Level.DEBUG: logging.DEBUG,
        Level.INFO: logging.INFO,
        Level.WARN: logging.WARNING,
        Level.ERROR: logging.ERROR,
    }[level]
