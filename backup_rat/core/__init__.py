"""Core backup engine."""

from .runner import BackupRunner
from .scanner import SourceScanner
from .scheduler import CopyScheduler
from .retention import RetentionManager
from .models import GlobalSettings, Target, TargetReport, RunSummary, RunStatus

__all__ = [
    "BackupRunner",
    "SourceScanner",
    "CopyScheduler",
    "RetentionManager",
    "GlobalSettings",
    "Target",
    "TargetReport",
    "RunSummary",
    "RunStatus",
]
