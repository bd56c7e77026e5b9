"""Operator alerting package."""

from .alerting import AlertRouter, AlertSink, ConsoleAlertSink, FileAlertSink, LoggingAlertSink
from .contracts import AlertEvent, AlertSeverity, now_utc

__all__ = [
    "AlertEvent",
    "AlertRouter",
    "AlertSeverity",
    "AlertSink",
    "ConsoleAlertSink",
    "FileAlertSink",
    "LoggingAlertSink",
    "now_utc",
]
