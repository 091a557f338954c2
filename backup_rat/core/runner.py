"""Main backup coordinator."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence

from .change_detector import needs_copy
from .exceptions import BackupError, DestinationUnwritable, SourceUnreadable
from .models import CopyStatus, CopyTask, GlobalSettings, RunSummary, Target, TargetReport
from .patterns import IgnoreRules
from .resolver import resolve_targets, resolve_thread_count
from .retention import RetentionManager
from .scanner import SourceScanner
from .scheduler import CopyScheduler


class BackupRunner:
    """Runs the backup of selected targets end to end."""

    def __init__(self, settings: GlobalSettings, targets: Sequence[Target]):
        """Initialize backup runner.

        Args:
            settings: Global settings for this run.
            targets: All configured targets, in configuration order.
        """
        self.settings = settings
        self.targets = tuple(targets)
        self.retention = RetentionManager()
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config_path: Optional[str] = None) -> "BackupRunner":
        """Build a runner from a configuration file.

        Args:
            config_path: Optional path to configuration file.
        """
        from ..config.config_manager import ConfigManager

        config_manager = ConfigManager(config_path)
        config_manager.load_config()
        return cls(config_manager.get_settings(), config_manager.get_targets())

    def select(self, selector: str) -> List[Target]:
        return resolve_targets(selector, self.targets)

    def run(self, selector: str, started_at: Optional[datetime] = None,
            on_report=None) -> RunSummary:
        """Back up every target the selector refers to.

        Targets are processed one after another. Errors of one target never
        stop the others.

        Args:
            selector: ``all`` or a target tag.
            started_at: Run start time used to name snapshots; defaults to now.
            on_report: Optional callable invoked with each TargetReport as soon
                as its target is done.

        Returns:
            RunSummary with one report per selected target.
        """
        started_at = started_at or datetime.now()
        summary = RunSummary(selector=selector, started_at=started_at)

        selected = self.select(selector)
        self.logger.info(f"Selector '{selector}' matched {len(selected)} of {len(self.targets)} targets")

        for target in selected:
            report = self.backup_target(target, started_at)
            summary.reports.append(report)
            if on_report is not None:
                on_report(report)

        summary.finished_at = datetime.now()
        self.logger.info(f"Backup finished with status '{summary.status.value}': "
                         f"{summary.total_copied} copied, {summary.total_failed} failed")
        return summary

    def backup_target(self, target: Target, started_at: Optional[datetime] = None) -> TargetReport:
        """Back up a single target.

        Args:
            target: Target to back up.
            started_at: Run start time used to name the snapshot.

        Returns:
            TargetReport for the target. Target-level errors are stored in
            ``report.error`` rather than raised.
        """
        started_at = started_at or datetime.now()
        report = TargetReport(target=target, started_at=datetime.now())
        self.logger.info(f"Backing up target: {target.display_name}")

        try:
            self._backup(target, started_at, report)
        except BackupError as e:
            self.logger.error(f"Failed to back up target {target.display_name}: {e}")
            report.error = str(e)

        report.finished_at = datetime.now()
        self.logger.info(f"Target {target.display_name}: {report.copied} copied, "
                         f"{report.skipped_unchanged} unchanged, {report.skipped_ignored} ignored, "
                         f"{report.failed} failed")
        return report

    def _backup(self, target: Target, started_at: datetime, report: TargetReport):
        self._check_source(target)
        self._check_destination(target)

        destination = self.retention.prepare(target, started_at)
        report.destination = destination

        scan = SourceScanner(IgnoreRules.for_target(target)).scan(target.source_path)
        report.scanned = scan.scanned
        report.skipped_ignored = len(scan.ignored_files)
        report.ignored_folders = len(scan.ignored_folders)
        for path, error in scan.errors:
            report.record_failure(path, error)

        tasks = self._build_tasks(target, destination, scan.files, report)

        scheduler = CopyScheduler(resolve_thread_count(target, self.settings),
                                  destination_root=target.destination_root)
        outcomes = scheduler.run(tasks)

        aborted = 0
        for outcome in outcomes:
            if outcome.status == CopyStatus.COPIED:
                report.copied += 1
                report.bytes_copied += outcome.bytes_copied
            else:
                if outcome.status == CopyStatus.ABORTED:
                    aborted += 1
                report.record_failure(outcome.task.source, outcome.error or outcome.status.value)

        self.retention.prune(target, report)

        if scheduler.aborted:
            raise DestinationUnwritable(
                f"Destination {target.destination_root} became unwritable, "
                f"{aborted} remaining files were not copied"
            )

    def _build_tasks(self, target: Target, destination: Path, files, report: TargetReport) -> List[CopyTask]:
        tasks = []
        for relative in files:
            if target.source_path.is_dir():
                source_file = target.source_path.joinpath(*relative.parts)
                destination_file = destination.joinpath(*relative.parts)
            else:
                source_file = target.source_path
                destination_file = destination / relative.name if target.versioned else destination

            try:
                required = needs_copy(target, source_file, destination_file)
            except OSError as e:
                self.logger.warning(f"Cannot check {source_file}: {e}")
                report.record_failure(source_file, e.strerror or str(e))
                continue

            if required:
                tasks.append(CopyTask(source=source_file, destination=destination_file, tag=target.tag))
            else:
                report.skipped_unchanged += 1
        return tasks

    def _check_source(self, target: Target):
        source = target.source_path
        if not source.exists():
            raise SourceUnreadable(f"Source path does not exist: {source}")
        if not os.access(source, os.R_OK):
            raise SourceUnreadable(f"Source path is not readable: {source}")

    def _check_destination(self, target: Target):
        root = target.destination_root
        if not root.is_dir():
            raise DestinationUnwritable(f"The destination is unavailable: {root}")
        if not os.access(root, os.W_OK):
            raise DestinationUnwritable(f"The destination is not writable: {root}")
