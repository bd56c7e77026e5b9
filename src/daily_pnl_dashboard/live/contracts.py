"""Alert event contract shared by the refresh cycle and alert sinks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


class AlertSeverity(StrEnum):
    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(slots=True)
class AlertEvent:
    severity: AlertSeverity
    source: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=now_utc)

    @property
    def fingerprint(self) -> tuple[str, str, str]:
        """Identity used for repeat suppression; details are ignored."""
        return (str(self.severity), self.source, self.message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "severity": str(self.severity),
            "source": self.source,
            "message": self.message,
            "details": self.details,
            "timestamp": self.timestamp.isoformat(),
        }

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "AlertEvent":
        timestamp = payload.get("timestamp")
        return AlertEvent(
            severity=AlertSeverity(payload["severity"]),
            source=str(payload.get("source", "")),
            message=str(payload.get("message", "")),
            details=dict(payload.get("details") or {}),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else now_utc(),
        )
