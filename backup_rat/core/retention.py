"""Destination layout and snapshot retention for backup targets."""

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .exceptions import DestinationUnwritable
from .models import Target, TargetReport

SNAPSHOT_FORMAT = "%Y-%m-%d_%H-%M-%S"


def format_snapshot_name(moment: datetime) -> str:
    """Format a run start time as a sortable snapshot directory name."""
    return moment.strftime(SNAPSHOT_FORMAT)


def parse_snapshot_name(name: str) -> Optional[datetime]:
    """Parse a snapshot directory name, or return None if it is not one."""
    try:
        return datetime.strptime(name, SNAPSHOT_FORMAT)
    except ValueError:
        return None


class RetentionManager:
    """Resolves where a run writes to and removes snapshots beyond ``keep_num``.

    Flat targets (``keep_num == 1``) mirror into
    ``destination_root/<source name>``. Versioned targets write each run into
    ``destination_root/<source name>/<timestamp>`` and keep only the newest
    ``keep_num`` snapshot directories.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def snapshot_root(self, target: Target) -> Path:
        """Directory holding the mirror or the snapshots of a target."""
        return target.destination_root / target.source_path.name

    def resolve_destination(self, target: Target, run_start_time: datetime) -> Path:
        """Get the base destination directory for this run.

        Args:
            target: Target being backed up.
            run_start_time: Local time the run started.

        Returns:
            Destination base directory.
        """
        root = self.snapshot_root(target)
        if target.versioned:
            return root / format_snapshot_name(run_start_time)
        return root

    def prepare(self, target: Target, run_start_time: datetime) -> Path:
        """Create the destination base directory for this run.

        A snapshot directory that already exists (two runs within the same
        second) is reused.

        Returns:
            Destination base directory.

        Raises:
            DestinationUnwritable: If the directory cannot be created.
        """
        destination = self.resolve_destination(target, run_start_time)
        if not target.source_path.is_dir() and not target.versioned:
            # A single-file flat target is written straight into destination_root
            return destination

        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationUnwritable(f"Cannot create destination {destination}: {e}")
        return destination

    def list_snapshots(self, target: Target) -> List[Path]:
        """List the snapshot directories of a target, oldest first.

        Entries whose names are not snapshot timestamps are ignored.
        """
        root = self.snapshot_root(target)
        if not root.is_dir():
            return []

        snapshots = []
        for entry in root.iterdir():
            moment = parse_snapshot_name(entry.name)
            if moment is not None and entry.is_dir():
                snapshots.append((moment, entry))

        snapshots.sort(key=lambda item: item[0])
        return [path for _, path in snapshots]

    def prune(self, target: Target, report: TargetReport) -> List[Path]:
        """Delete the oldest snapshots so that at most ``keep_num`` remain.

        Nothing is deleted when the run copied no files, so a failed run cannot
        push good history out. The empty snapshot directory of such a run is
        removed instead.

        Args:
            target: Target that was just backed up.
            report: Report of the run; removal failures are recorded in it.

        Returns:
            Snapshot directories that were removed.
        """
        if not target.versioned:
            return []

        if report.copied == 0:
            self._discard_empty_snapshot(report.destination)
            self.logger.info(f"Skipping retention for {target.display_name}: no files copied")
            return []

        snapshots = self.list_snapshots(target)
        excess = len(snapshots) - target.keep_num
        removed = []
        for snapshot in snapshots[:max(excess, 0)]:
            try:
                shutil.rmtree(snapshot)
            except OSError as e:
                self.logger.error(f"Could not remove old snapshot {snapshot}: {e}")
                report.record_failure(snapshot, f"retention: {e}")
                continue
            self.logger.info(f"Removed old snapshot {snapshot}")
            removed.append(snapshot)

        report.pruned.extend(removed)
        return removed

    def _discard_empty_snapshot(self, snapshot: Optional[Path]):
        if snapshot is None or not snapshot.is_dir():
            return
        try:
            snapshot.rmdir()
            self.logger.debug(f"Removed empty snapshot {snapshot}")
        except OSError as e:
            # Not empty: a previous run in the same second wrote into it
            self.logger.debug(f"Keeping snapshot {snapshot}: {e}")
