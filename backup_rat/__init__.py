"""
backup-rat - A versatile configuration-driven backup tool.

This package copies configured backup targets to their destinations, skipping
unchanged and ignored files, and keeps a bounded number of dated snapshots
for versioned targets.
"""

__version__ = "0.6.0"

from .core.runner import BackupRunner
from .core.scheduler import CopyScheduler
from .reporters.text_reporter import TextReporter

__all__ = ["BackupRunner", "CopyScheduler", "TextReporter"]
