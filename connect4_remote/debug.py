"""
debug.py - Debug and logging functionality for remote Connect Four

This module provides centralized logging for the server and the client with
configurable levels, an optional log file, per-component filtering and simple
performance timers. Every module logs through the shared ``debug`` instance
and names its component ("board", "arbiter", "client"...); each component
gets its own child of the ``connect4_remote`` logger.
"""

import logging
import sys
import time
from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterable, Iterator, Optional, Set

LOGGER_NAME = "connect4_remote"
LOG_FORMAT = '%(asctime)s %(levelname)-7s %(name)s: %(message)s'


class DebugLevel(Enum):
    NONE = 0
    ERROR = 1
    WARNING = 2
    INFO = 3
    DEBUG = 4
    TRACE = 5

    @property
    def logging_level(self) -> int:
        return LEVEL_MAP[self]


# Standard logging levels; TRACE sits below DEBUG and NONE above CRITICAL
LEVEL_MAP = {
    DebugLevel.NONE: logging.CRITICAL + 10,
    DebugLevel.ERROR: logging.ERROR,
    DebugLevel.WARNING: logging.WARNING,
    DebugLevel.INFO: logging.INFO,
    DebugLevel.DEBUG: logging.DEBUG,
    DebugLevel.TRACE: logging.DEBUG - 5,
}
logging.addLevelName(LEVEL_MAP[DebugLevel.TRACE], "TRACE")


class DebugManager:
    """Level, component filter, handlers and timers for the package logger."""

    def __init__(self, logger_name: str = LOGGER_NAME):
        self._root = logging.getLogger(logger_name)
        self._root.propagate = False
        self._level = DebugLevel.INFO
        self._enabled = True
        self._components: Set[str] = set()  # empty: every component
        self._timers: Dict[str, float] = {}
        self._file_handler: Optional[logging.FileHandler] = None

        if not self._root.handlers:
            stream = logging.StreamHandler(sys.stderr)
            stream.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%H:%M:%S'))
            self._root.addHandler(stream)
        self._root.setLevel(self._level.logging_level)

    @property
    def level(self) -> DebugLevel:
        return self._level

    def configure(self, level: Optional[DebugLevel] = None,
                  enabled: Optional[bool] = None,
                  log_file: Optional[str] = None,
                  components: Optional[Iterable[str]] = None):
        """
        Change any subset of the logging settings.

        Args:
            level: Most verbose level that is still emitted
            enabled: Master switch
            log_file: Also append to this file ("" stops file logging)
            components: Only log these components (empty for all)
        """
        if level is not None:
            self._level = level
            self._root.setLevel(level.logging_level)
        if enabled is not None:
            self._enabled = enabled
        if components is not None:
            self._components = set(components)
        if log_file is not None:
            self._set_log_file(log_file)

    def _set_log_file(self, path: str):
        if self._file_handler is not None:
            self._root.removeHandler(self._file_handler)
            self._file_handler.close()
            self._file_handler = None
        if path:
            self._file_handler = logging.FileHandler(path, encoding='utf-8')
            self._file_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            self._root.addHandler(self._file_handler)

    def enabled_for(self, level: DebugLevel, component: Optional[str] = None) -> bool:
        if not self._enabled or self._level == DebugLevel.NONE or level.value > self._level.value:
            return False
        return not (component and self._components and component not in self._components)

    def log(self, level: DebugLevel, message: str, component: Optional[str] = None):
        """Emit ``message`` on the component's child logger if the filters allow it."""
        if self.enabled_for(level, component):
            logger = self._root.getChild(component) if component else self._root
            logger.log(level.logging_level, message)

    def error(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.ERROR, message, component)

    def warning(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.WARNING, message, component)

    def info(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.INFO, message, component)

    def debug(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.DEBUG, message, component)

    def trace(self, message: str, component: Optional[str] = None):
        self.log(DebugLevel.TRACE, message, component)

    # Timers
    def start_timer(self, marker_name: str):
        self._timers[marker_name] = time.perf_counter()

    def end_timer(self, marker_name: str, component: Optional[str] = None) -> Optional[float]:
        """
        Stop a timer and trace the elapsed time.

        Returns:
            Seconds since start_timer, or None for an unknown marker
        """
        started = self._timers.pop(marker_name, None)
        if started is None:
            self.warning(f"Timer '{marker_name}' was never started", "debug")
            return None
        elapsed = time.perf_counter() - started
        self.trace(f"{marker_name} took {elapsed * 1000:.3f} ms", component)
        return elapsed

    @contextmanager
    def timed(self, marker_name: str, component: Optional[str] = None) -> Iterator[None]:
        """Time the enclosed block under ``marker_name``."""
        self.start_timer(marker_name)
        try:
            yield
        finally:
            self.end_timer(marker_name, component)

    def set_from_string(self, level_str: str) -> bool:
        """Set the level from a name such as "info" (CLI flags, env vars)."""
        try:
            level = DebugLevel[level_str.strip().upper()]
        except KeyError:
            self.warning(f"Unknown debug level: {level_str}", "debug")
            return False
        self.configure(level=level)
        self.debug(f"Debug level set to {level.name}", "debug")
        return True


# Shared instance used by every module
debug = DebugManager()
