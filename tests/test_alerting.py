from __future__ import annotations

from datetime import datetime, timedelta, timezone
import io
import json
import logging

from daily_pnl_dashboard.live import (
    AlertEvent,
    AlertRouter,
    AlertSeverity,
    ConsoleAlertSink,
    FileAlertSink,
    LoggingAlertSink,
)


def test_router_fans_out_to_default_and_severity_sinks(tmp_path) -> None:
    stream = io.StringIO()
    path = tmp_path / "alerts" / "alerts.jsonl"
    router = AlertRouter(
        default_sinks=[ConsoleAlertSink(stream=stream)],
        severity_sinks={AlertSeverity.CRITICAL: [FileAlertSink(path)]},
    )
    router.warning(source="refresh_cycle", message="fill fetch failed", details={"symbols": ["ETHUSDT"]})
    router.critical(source="refresh_cycle", message="account fetch failed")

    printed = stream.getvalue().splitlines()
    assert len(printed) == 2
    assert "[WARNING]" in printed[0]
    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    event = AlertEvent.from_dict(json.loads(lines[0]))
    assert event.severity == AlertSeverity.CRITICAL
    assert event.message == "account fetch failed"


def test_repeated_alerts_are_suppressed_within_cooldown() -> None:
    stream = io.StringIO()
    router = AlertRouter(default_sinks=[ConsoleAlertSink(stream=stream)], repeat_cooldown_seconds=60.0)
    start = datetime(2026, 1, 1, tzinfo=timezone.utc)

    def event(offset_seconds: int) -> AlertEvent:
        return AlertEvent(
            severity=AlertSeverity.CRITICAL,
            source="refresh_cycle",
            message="account fetch failed",
            details={"sequence": offset_seconds},
            timestamp=start + timedelta(seconds=offset_seconds),
        )

    assert router.route(event(0)) is True
    assert router.route(event(30)) is False
    assert router.route(event(61)) is True
    router.reset("refresh_cycle")
    assert router.route(event(62)) is True
    assert len(stream.getvalue().splitlines()) == 3


def test_logging_sink_maps_severity_to_log_level(caplog) -> None:
    router = AlertRouter(default_sinks=[LoggingAlertSink()])
    with caplog.at_level(logging.INFO, logger="daily_pnl_dashboard.alerts"):
        router.critical(source="refresh_cycle", message="account fetch failed")
        router.info(source="refresh_cycle", message="account fetch recovered")
    assert [r.levelno for r in caplog.records] == [logging.CRITICAL, logging.INFO]
    assert "account fetch failed" in caplog.records[0].getMessage()
