"""Decides whether a source file has to be copied."""

import os
from pathlib import Path

from .models import Target

# Coarsest mtime resolution of common backup filesystems (FAT keeps 2 s)
MTIME_TOLERANCE_NS = 2_000_000_000


def needs_copy(target: Target, source_file: Path, destination_file: Path) -> bool:
    """Check whether a file must be copied for this run.

    Versioned targets write every file into a fresh snapshot, so there is
    nothing to compare against. Flat targets copy unconditionally when
    ``always_copy`` is set, otherwise only when the destination is missing,
    older than the source, or of a different size. Modification times less
    than two seconds apart count as equal.

    Args:
        target: Target the file belongs to.
        source_file: File in the source tree.
        destination_file: Where the file would be written.

    Returns:
        True if the file should be copied.

    Raises:
        OSError: If the source file cannot be stat'ed.
    """
    if target.versioned or target.always_copy:
        return True

    try:
        destination_stat = os.stat(destination_file)
    except FileNotFoundError:
        return True

    source_stat = os.stat(source_file)
    if source_stat.st_mtime_ns - destination_stat.st_mtime_ns >= MTIME_TOLERANCE_NS:
        return True
    return source_stat.st_size != destination_stat.st_size
