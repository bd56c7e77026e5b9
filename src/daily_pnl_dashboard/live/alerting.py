"""Alert routing for account and market-data failures."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
import json
import logging
from pathlib import Path
import sys
from typing import TextIO

from .contracts import AlertEvent, AlertSeverity

_LOG_LEVELS = {
    AlertSeverity.INFO: logging.INFO,
    AlertSeverity.WARNING: logging.WARNING,
    AlertSeverity.CRITICAL: logging.CRITICAL,
}


class AlertSink(ABC):
    """Abstract sink for alert events."""

    @abstractmethod
    def send(self, event: AlertEvent) -> None:
        """Deliver one alert event."""


class ConsoleAlertSink(AlertSink):
    """One line per alert on a text stream, stderr unless given."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self.stream = stream

    def send(self, event: AlertEvent) -> None:
        stamp = event.timestamp.strftime("%H:%M:%S")
        line = f"[{stamp}] [{event.severity.upper()}] {event.source}: {event.message}"
        if event.details:
            line += f" {json.dumps(event.details, default=str, sort_keys=True)}"
        print(line, file=self.stream or sys.stderr)


class LoggingAlertSink(AlertSink):
    """Forward alerts into the standard logging tree."""

    def __init__(self, logger_name: str = "daily_pnl_dashboard.alerts") -> None:
        self.logger = logging.getLogger(logger_name)

    def send(self, event: AlertEvent) -> None:
        self.logger.log(_LOG_LEVELS[event.severity], "%s: %s %s", event.source, event.message, event.details)


class FileAlertSink(AlertSink):
    """Append alerts as JSONL."""

    def __init__(self, output_path: str | Path) -> None:
        self.output_path = Path(output_path)
        self.output_path.parent.mkdir(parents=True, exist_ok=True)

    def send(self, event: AlertEvent) -> None:
        with self.output_path.open("a", encoding="utf-8") as handle:
            handle.write(json.dumps(event.to_dict(), default=str) + "\n")


@dataclass(slots=True)
class AlertRouter:
    """
    Routes alert events by severity to configured sinks.

    default_sinks are always used; severity_sinks are additive. With a
    positive `repeat_cooldown_seconds`, an event whose fingerprint was routed
    less than that long ago is dropped, so a failure that persists across
    refresh cycles alerts once per cooldown instead of once per cycle.
    """

    default_sinks: list[AlertSink] = field(default_factory=list)
    severity_sinks: dict[AlertSeverity, list[AlertSink]] = field(default_factory=dict)
    repeat_cooldown_seconds: float = 0.0
    _last_sent: dict[tuple[str, str, str], datetime] = field(default_factory=dict, repr=False)

    def _suppressed(self, event: AlertEvent) -> bool:
        if self.repeat_cooldown_seconds <= 0:
            return False
        previous = self._last_sent.get(event.fingerprint)
        if previous is not None and (event.timestamp - previous).total_seconds() < self.repeat_cooldown_seconds:
            return True
        self._last_sent[event.fingerprint] = event.timestamp
        return False

    def route(self, event: AlertEvent) -> bool:
        if self._suppressed(event):
            return False
        sinks: list[AlertSink] = list(self.default_sinks)
        sinks.extend(self.severity_sinks.get(event.severity, []))
        for sink in sinks:
            sink.send(event)
        return True

    def reset(self, source: str | None = None) -> None:
        """Forget cooldown state, for one source or all of them."""
        if source is None:
            self._last_sent.clear()
            return
        for key in [k for k in self._last_sent if k[1] == source]:
            del self._last_sent[key]

    def _emit(self, severity: AlertSeverity, source: str, message: str, details: dict | None) -> bool:
        return self.route(AlertEvent(severity=severity, source=source, message=message, details=details or {}))

    def info(self, source: str, message: str, details: dict | None = None) -> bool:
        return self._emit(AlertSeverity.INFO, source, message, details)

    def warning(self, source: str, message: str, details: dict | None = None) -> bool:
        return self._emit(AlertSeverity.WARNING, source, message, details)

    def critical(self, source: str, message: str, details: dict | None = None) -> bool:
        return self._emit(AlertSeverity.CRITICAL, source, message, details)

    @staticmethod
    def console_only(repeat_cooldown_seconds: float = 0.0) -> "AlertRouter":
        return AlertRouter(default_sinks=[ConsoleAlertSink()], repeat_cooldown_seconds=repeat_cooldown_seconds)

    @staticmethod
    def with_console_and_file(file_path: str | Path, repeat_cooldown_seconds: float = 0.0) -> "AlertRouter":
        return AlertRouter(
            default_sinks=[ConsoleAlertSink(), FileAlertSink(file_path)],
            repeat_cooldown_seconds=repeat_cooldown_seconds,
        )
