"""
Roost Diagnostics — Public API
================================
Pluggable logging sinks for the message bus.
"""

from roost.diagnostics.sinks import (
    ConsoleLogSink,
    LogChannel,
    LogSink,
    NullLogSink,
)

__all__ = [
    "LogSink",
    "ConsoleLogSink",
    "NullLogSink",
    "LogChannel",
]
