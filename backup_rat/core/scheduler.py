"""Bounded thread pool that executes file copy tasks."""

import errno
import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Sequence

from .exceptions import FileCopyFailed
from .models import CopyOutcome, CopyStatus, CopyTask

# Errors that mean nothing more can be written to the destination
DESTINATION_FATAL_ERRNOS = {errno.EROFS}


class CopyScheduler:
    """Copies files with a fixed number of worker threads.

    Workers return a CopyOutcome per task; outcomes are collected on the
    calling thread, so no state is shared between workers apart from the
    executor's queue and the abort flag. A failed copy never stops its
    siblings. A destination-level failure (read-only filesystem, destination
    root gone) stops tasks that have not started yet; they are reported as
    aborted.
    """

    def __init__(self, thread_count: int = 1, destination_root: Optional[Path] = None):
        """Initialize copy scheduler.

        Args:
            thread_count: Number of worker threads, at least 1.
            destination_root: Directory whose disappearance aborts the run.
        """
        self.thread_count = max(1, int(thread_count))
        self.destination_root = destination_root
        self.logger = logging.getLogger(__name__)
        self._abort = threading.Event()

    @property
    def aborted(self) -> bool:
        return self._abort.is_set()

    def run(self, tasks: Sequence[CopyTask]) -> List[CopyOutcome]:
        """Execute all tasks and wait for every one of them.

        Args:
            tasks: Copy tasks to execute.

        Returns:
            One outcome per task, in completion order.
        """
        if not tasks:
            return []

        self._abort.clear()
        self.logger.debug(f"Copying {len(tasks)} files with {self.thread_count} threads")

        outcomes = []
        with ThreadPoolExecutor(max_workers=self.thread_count,
                                thread_name_prefix="copy") as executor:
            futures = [executor.submit(self._execute, task) for task in tasks]
            for future in as_completed(futures):
                outcome = future.result()
                outcomes.append(outcome)
                if outcome.status == CopyStatus.FAILED:
                    self.logger.error(outcome.error)

        return outcomes

    def _execute(self, task: CopyTask) -> CopyOutcome:
        if self._abort.is_set():
            return CopyOutcome(task=task, status=CopyStatus.ABORTED,
                               error="aborted: destination unwritable")

        try:
            size = copy_file(task.source, task.destination)
        except FileCopyFailed as e:
            fatal = self._is_destination_fatal(e)
            if fatal:
                self._abort.set()
            return CopyOutcome(task=task, status=CopyStatus.FAILED, error=str(e),
                               destination_fatal=fatal)

        self.logger.debug(f"Copied {task.source} -> {task.destination}")
        return CopyOutcome(task=task, status=CopyStatus.COPIED, bytes_copied=size)

    def _is_destination_fatal(self, error: FileCopyFailed) -> bool:
        cause = error.__cause__
        if isinstance(cause, OSError) and cause.errno in DESTINATION_FATAL_ERRNOS:
            return True
        if self.destination_root is not None and not self.destination_root.is_dir():
            return True
        return False


def copy_file(source: Path, destination: Path) -> int:
    """Copy one file, creating parent directories and keeping its mtime.

    Args:
        source: File to copy.
        destination: Target file path.

    Returns:
        Number of bytes copied.

    Raises:
        FileCopyFailed: If the file could not be copied.
    """
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, destination)
        return destination.stat().st_size
    except OSError as e:
        raise FileCopyFailed(str(source), str(destination), e.strerror or str(e)) from e
