"""Logging utilities for sprinttree.

This module provides a custom BUILD log level and a context manager for
enabling/disabling sprinttree logging with loguru.

Note:
    Importing this module removes loguru's default stderr handler (ID 0) to
    prevent duplicate output when ``enable_logging()`` adds its own handler.
    If your application configures loguru handlers *before* importing
    sprinttree, handler 0 may no longer be the default; in that case the
    removal is a no-op (the ``ValueError`` is suppressed). Configure loguru
    handlers *after* importing sprinttree, or re-add a stderr handler
    explicitly if needed.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import warnings
from typing import TYPE_CHECKING, ClassVar, Final, Literal

from loguru import logger

if TYPE_CHECKING:
    from types import TracebackType

    from loguru import Record

PACKAGE_NAME: Final[str] = __name__.split(".")[0]

# Handler 0 is the stderr handler loguru creates at import time.
with contextlib.suppress(ValueError):
    logger.remove(0)

# Marks build_tree / classify invocations (between INFO=20 and WARNING=30)
BUILD_LEVEL: Final[str] = "BUILD"
BUILD_LEVEL_NUMBER: Final[int] = 25


def _register_build_level() -> None:
    """Register the BUILD custom log level with loguru.

    Looks up the BUILD level and registers it when missing. If it already
    exists with a different numeric value, emits a UserWarning because loguru
    does not permit changing the numeric value of an existing level.
    """
    try:
        existing_level = logger.level(BUILD_LEVEL)
    except ValueError:
        logger.level(BUILD_LEVEL, no=BUILD_LEVEL_NUMBER, icon="🌳")
    else:
        if existing_level.no != BUILD_LEVEL_NUMBER:
            msg = f"BUILD level already registered with numeric value {existing_level.no}, expected {BUILD_LEVEL_NUMBER}"
            warnings.warn(msg, stacklevel=2)


_register_build_level()

type LogLevel = Literal[
    "TRACE",
    "DEBUG",
    "INFO",
    "BUILD",
    "WARNING",
    "ERROR",
    "CRITICAL",
]

type LogFormat = Literal["short", "full"]


class LoggingHandle:
    """Handle for managing sprinttree logging lifecycle.

    Stores the handler ID from logger.add() and provides cleanup via disable()
    or automatically through the context manager protocol.

    Examples:
        >>> with enable_logging():  # doctest: +SKIP
        ...     tree = build_tree(dataset, schema)

        >>> handle = enable_logging(level="DEBUG")  # doctest: +SKIP
        >>> tree = build_tree(dataset, schema)  # doctest: +SKIP
        >>> handle.disable()  # doctest: +SKIP
    """

    _active_ids: ClassVar[set[int]] = set()
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self, handler_id: int) -> None:
        """Initialize the logging handle.

        Args:
            handler_id (int): The loguru handler ID from logger.add().
        """
        self.handler_id: int | None = handler_id
        with LoggingHandle._lock:
            LoggingHandle._active_ids.add(handler_id)

    def disable(self) -> None:
        """Remove the handler associated with this logging handle.

        When this is the last active handle, ``logger.disable("sprinttree")``
        is called so that package records are suppressed again.
        """
        with LoggingHandle._lock:
            if self.handler_id is None:
                return
            LoggingHandle._active_ids.discard(self.handler_id)
            with contextlib.suppress(ValueError):
                logger.remove(self.handler_id)
            self.handler_id = None
            if not LoggingHandle._active_ids:
                logger.disable(PACKAGE_NAME)

    def __enter__(self) -> LoggingHandle:
        """Enter context manager.

        Returns:
            LoggingHandle: This handle instance.
        """
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Exit context manager and disable logging."""
        self.disable()

    @classmethod
    def get_active_handle_count(cls) -> int:
        """Return the number of currently active logging handles.

        Returns:
            int: Count of active handles that have not been disabled.
        """
        with cls._lock:
            return len(cls._active_ids)


def enable_logging(
    *,
    level: LogLevel = BUILD_LEVEL,
    log_format: LogFormat = "short",
) -> LoggingHandle:
    """Enable sprinttree logging on stderr.

    Each call returns an independent handle that manages its own handler; use
    the handle's disable() method or the context manager protocol to clean up.

    Args:
        level (LogLevel): Minimum log level to display. Defaults to "BUILD",
            which surfaces one record per build_tree / classify call. Lower to
            "DEBUG" to see every split and leaf as the tree grows.
        log_format (LogFormat): "short" (default) shows the function name;
            "full" adds module:function:line.

    Returns:
        LoggingHandle: Independent handle for managing the logging handler.

    Note:
        This function calls ``logger.enable("sprinttree")``. When the last
        active ``LoggingHandle`` is disabled, ``logger.disable("sprinttree")``
        is called automatically, which also silences any handler your
        application routed sprinttree records to on its own.
    """
    logger.enable(PACKAGE_NAME)

    if log_format == "short":
        format_str = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
            "<cyan>{function}</cyan> - "
            "<level>{message}</level> {extra}"
        )
    else:  # "full"
        format_str = (
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "  # noqa: RUF027 - loguru format string
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
            "<level>{message}</level> {extra}"
        )

    handler_id = logger.add(
        sys.stderr,
        level=level,
        filter=_is_sprinttree_record,
        format=format_str,
    )

    return LoggingHandle(handler_id)


def _is_sprinttree_record(record: Record) -> bool:
    """Pass only records emitted from inside the sprinttree package.

    Args:
        record (Record): The loguru Record object to filter.

    Returns:
        bool: True if the record comes from a sprinttree module.
    """
    name = record["name"]
    return name is not None and name.startswith(PACKAGE_NAME)
