"""
Roost Diagnostics — Log Sinks
================================
Swappable logging backends for the message bus.

Every sink exposes the same four leveled calls:
    trace / info / warn / error  (message, tag)

ConsoleLogSink is the default and forwards to the standard
"roost" logger. NullLogSink silences the bus. Any object with
the same four methods may be installed instead.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from roost.config.settings import DEFAULT_LOG_TAG


# ══════════════════════════════════════════════════════════════
# SINK PROTOCOL
# ══════════════════════════════════════════════════════════════

class LogSink(Protocol):
    """Leveled logging backend. Tag identifies the emitting bus."""

    def trace(self, message: str, tag: str) -> None:
        ...  # pragma: no cover

    def info(self, message: str, tag: str) -> None:
        ...  # pragma: no cover

    def warn(self, message: str, tag: str) -> None:
        ...  # pragma: no cover

    def error(self, message: str, tag: str) -> None:
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# CONSOLE SINK (default)
# ══════════════════════════════════════════════════════════════

class ConsoleLogSink:
    """
    Default sink. Forwards to a standard library logger.

    trace maps to DEBUG. The tag is prefixed to the message and
    attached to the record as extra["tag"] for structured handlers.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger("roost")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def _emit(self, level: int, message: str, tag: str) -> None:
        self._logger.log(
            level, f"[{tag}] {message}", extra={"tag": tag}
        )

    def trace(self, message: str, tag: str) -> None:
        self._emit(logging.DEBUG, message, tag)

    def info(self, message: str, tag: str) -> None:
        self._emit(logging.INFO, message, tag)

    def warn(self, message: str, tag: str) -> None:
        self._emit(logging.WARNING, message, tag)

    def error(self, message: str, tag: str) -> None:
        self._emit(logging.ERROR, message, tag)


# ══════════════════════════════════════════════════════════════
# NULL SINK
# ══════════════════════════════════════════════════════════════

class NullLogSink:
    """Discards everything."""

    def trace(self, message: str, tag: str) -> None:
        pass

    def info(self, message: str, tag: str) -> None:
        pass

    def warn(self, message: str, tag: str) -> None:
        pass

    def error(self, message: str, tag: str) -> None:
        pass


# ══════════════════════════════════════════════════════════════
# LOG CHANNEL
# ══════════════════════════════════════════════════════════════

class LogChannel:
    """
    Binds the active sink and tag for one bus.

    Components hold the channel, not the sink, so installing a
    new sink at runtime takes effect everywhere at once.
    """

    def __init__(
        self,
        sink: Optional[LogSink] = None,
        tag: str = DEFAULT_LOG_TAG,
    ):
        self._sink: LogSink = sink if sink is not None else ConsoleLogSink()
        self._tag = tag

    @property
    def sink(self) -> LogSink:
        return self._sink

    @property
    def tag(self) -> str:
        return self._tag

    def install(self, sink: Optional[LogSink], tag: Optional[str] = None) -> None:
        """Install a sink (None restores the console sink) and optional tag."""
        self._sink = sink if sink is not None else ConsoleLogSink()
        if tag:
            self._tag = tag

    def enable(self, enabled: bool) -> None:
        """Switch between the console sink and silence."""
        self._sink = ConsoleLogSink() if enabled else NullLogSink()

    def trace(self, message: str) -> None:
        self._sink.trace(message, self._tag)

    def info(self, message: str) -> None:
        self._sink.info(message, self._tag)

    def warn(self, message: str) -> None:
        self._sink.warn(message, self._tag)

    def error(self, message: str) -> None:
        self._sink.error(message, self._tag)

    def exception(self, message: str) -> None:
        """
        Error with the active traceback.

        Console sinks get exc_info attached; other sinks receive
        the message only.
        """
        if isinstance(self._sink, ConsoleLogSink):
            self._sink.logger.error(
                f"[{self._tag}] {message}",
                extra={"tag": self._tag},
                exc_info=True,
            )
        else:
            self._sink.error(message, self._tag)
