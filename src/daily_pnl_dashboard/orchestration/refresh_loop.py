"""Fixed-period refresh loop driving the coordinator."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging

from .refresh_cycle import CycleReport, RefreshCoordinator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RefreshLoopConfig:
    """Runtime configuration for the periodic refresh loop."""

    refresh_seconds: float = 30.0
    max_cycles: int | None = None
    stop_on_exception: bool = True


class RefreshLoop:
    """
    Start one refresh cycle every `refresh_seconds`.

    A new cycle does not wait for the previous one; overlapping cycles all
    publish to the coordinator's board, which keeps only the newest sequence.
    Each finished cycle is inspected once and then forgotten, so an unbounded
    loop holds only the cycles still in flight.
    """

    def __init__(self, coordinator: RefreshCoordinator, config: RefreshLoopConfig | None = None) -> None:
        self.coordinator = coordinator
        self.config = config or RefreshLoopConfig(refresh_seconds=coordinator.config.refresh_seconds)
        self._in_flight: set[asyncio.Task[CycleReport]] = set()
        self._results: list[CycleReport] | None = None
        self._failure: BaseException | None = None

    async def run_once(self) -> CycleReport:
        return await self.coordinator.run_cycle()

    def _on_done(self, task: asyncio.Task[CycleReport]) -> None:
        self._in_flight.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is None:
            if self._results is not None:
                self._results.append(task.result())
            return
        if self.config.stop_on_exception:
            if self._failure is None:
                self._failure = exc
            return
        logger.error("refresh cycle failed: %s", exc)

    def _raise_failure(self) -> None:
        if self._failure is not None:
            exc, self._failure = self._failure, None
            raise exc

    async def run_forever(self) -> list[CycleReport]:
        """
        Run until `max_cycles` cycles have started and finished.

        Returns the successful reports in completion order when `max_cycles`
        is set; an unbounded loop keeps no results and only ends on error.
        """
        self._results = [] if self.config.max_cycles is not None else None
        self._failure = None
        started = 0
        try:
            while True:
                self._raise_failure()
                task = asyncio.create_task(self.coordinator.run_cycle())
                self._in_flight.add(task)
                task.add_done_callback(self._on_done)
                started += 1
                if self.config.max_cycles is not None and started >= self.config.max_cycles:
                    break
                await asyncio.sleep(max(self.config.refresh_seconds, 0.0))
            if self._in_flight:
                await asyncio.wait(set(self._in_flight))
            self._raise_failure()
        finally:
            for task in list(self._in_flight):
                task.cancel()
        return list(self._results or [])
