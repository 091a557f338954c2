"""Data models for the backup engine."""

import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple, Union


def host_parallelism() -> int:
    """Number of worker threads to use when nothing else is configured."""
    return os.cpu_count() or 1


@dataclass(frozen=True)
class GlobalSettings:
    """Process-wide settings, fixed for the duration of a run."""
    multi_threaded: bool = True
    thread_count: int = field(default_factory=host_parallelism)
    color: bool = True
    fancy_text: bool = True
    verbose: bool = False
    daemon_interval: int = 0


@dataclass(frozen=True)
class LiteralPattern:
    """Matches a candidate string exactly."""
    text: str


@dataclass(frozen=True)
class RegexPattern:
    """Matches a candidate string by regular-expression search."""
    source: str
    compiled: object = field(compare=False, repr=False)


Pattern = Union[LiteralPattern, RegexPattern]


@dataclass(frozen=True)
class Target:
    """One configured source-to-destination backup unit."""
    source_path: Path
    destination_root: Path
    tag: Optional[str] = None
    optional: bool = False
    always_copy: bool = False
    multi_threaded_override: Optional[bool] = None
    thread_count_override: Optional[int] = None
    ignore_files: Tuple[Pattern, ...] = ()
    ignore_folders: Tuple[Pattern, ...] = ()
    keep_num: int = 1

    @property
    def versioned(self) -> bool:
        return self.keep_num > 1

    @property
    def display_name(self) -> str:
        return self.tag if self.tag else str(self.source_path)


@dataclass(frozen=True)
class CopyTask:
    """A single file copy handed to the scheduler."""
    source: Path
    destination: Path
    tag: Optional[str] = None


class CopyStatus(str, Enum):
    COPIED = "copied"
    FAILED = "failed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class CopyOutcome:
    """Result of executing one CopyTask."""
    task: CopyTask
    status: CopyStatus
    error: Optional[str] = None
    bytes_copied: int = 0
    destination_fatal: bool = False


@dataclass
class TargetReport:
    """Outcome of backing up a single target."""
    target: Target
    destination: Optional[Path] = None
    scanned: int = 0
    copied: int = 0
    skipped_unchanged: int = 0
    skipped_ignored: int = 0
    ignored_folders: int = 0
    failed: int = 0
    bytes_copied: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)
    pruned: List[Path] = field(default_factory=list)
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and self.failed == 0

    def record_failure(self, path: Union[str, Path], error: str) -> None:
        self.failed += 1
        self.failures.append((str(path), error))


class RunStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial failure"
    NOTHING_SELECTED = "nothing selected"


EXIT_CODES = {
    RunStatus.SUCCESS: 0,
    RunStatus.PARTIAL_FAILURE: 1,
    RunStatus.NOTHING_SELECTED: 2,
}


@dataclass
class RunSummary:
    """Aggregate of all target reports for one invocation."""
    selector: str
    reports: List[TargetReport] = field(default_factory=list)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def status(self) -> RunStatus:
        if not self.reports:
            return RunStatus.NOTHING_SELECTED
        if all(report.succeeded for report in self.reports):
            return RunStatus.SUCCESS
        return RunStatus.PARTIAL_FAILURE

    @property
    def exit_code(self) -> int:
        return EXIT_CODES[self.status]

    @property
    def total_copied(self) -> int:
        return sum(report.copied for report in self.reports)

    @property
    def total_failed(self) -> int:
        return sum(report.failed for report in self.reports)

    @property
    def total_scanned(self) -> int:
        return sum(report.scanned for report in self.reports)

    @property
    def total_bytes(self) -> int:
        return sum(report.bytes_copied for report in self.reports)
