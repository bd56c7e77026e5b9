"""Orchestration package."""

from .refresh_cycle import CycleReport, CycleSnapshot, RefreshCoordinator, ReportBoard, compute_report
from .refresh_loop import RefreshLoop, RefreshLoopConfig

__all__ = [
    "CycleReport",
    "CycleSnapshot",
    "RefreshCoordinator",
    "RefreshLoop",
    "RefreshLoopConfig",
    "ReportBoard",
    "compute_report",
]
