"""Source tree walking with ignore-rule pruning."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Tuple

from .patterns import IgnoreRules


@dataclass
class ScanResult:
    """Files found under a target's source path."""
    root: Path
    files: List[PurePosixPath] = field(default_factory=list)
    ignored_files: List[PurePosixPath] = field(default_factory=list)
    ignored_folders: List[PurePosixPath] = field(default_factory=list)
    errors: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def scanned(self) -> int:
        return len(self.files) + len(self.ignored_files)


class SourceScanner:
    """Walks a source tree depth-first and applies a target's ignore rules.

    Folder rules are checked before a folder is descended into, so ignored
    subtrees are never listed. File rules are checked against base names.
    Symbolic links to folders are followed unless they point back at one of
    their own ancestors; such loops are reported as errors.
    Paths in the result are relative to the source root.
    """

    def __init__(self, rules: IgnoreRules):
        """Initialize source scanner.

        Args:
            rules: Ignore rules of the target being scanned.
        """
        self.rules = rules
        self.logger = logging.getLogger(__name__)

    def scan(self, source: Path) -> ScanResult:
        """Collect the files of a source path.

        Args:
            source: Directory to walk, or a single file.

        Returns:
            ScanResult with kept and ignored entries.
        """
        result = ScanResult(root=source)

        if not source.is_dir():
            relative = PurePosixPath(source.name)
            if self.rules.file_ignored(source.name):
                result.ignored_files.append(relative)
            else:
                result.files.append(relative)
            return result

        def on_error(error: OSError):
            self.logger.warning(f"Cannot read {error.filename}: {error.strerror}")
            result.errors.append((str(error.filename), error.strerror or str(error)))

        for root, dirs, files in os.walk(source, onerror=on_error, followlinks=True):
            relative_root = PurePosixPath(Path(root).relative_to(source).as_posix())
            real_root = os.path.realpath(root)

            kept_dirs = []
            for name in sorted(dirs):
                relative_dir = relative_root / name
                if self.rules.folder_ignored(str(relative_dir)):
                    self.logger.debug(f"Ignoring folder {relative_dir}")
                    result.ignored_folders.append(relative_dir)
                elif _is_link_loop(os.path.join(root, name), real_root):
                    self.logger.warning(f"Not following symbolic link loop {relative_dir}")
                    result.errors.append((os.path.join(root, name), "Symbolic link loop, not followed"))
                else:
                    kept_dirs.append(name)
            dirs[:] = kept_dirs  # Don't recurse into ignored folders

            for name in sorted(files):
                relative_file = relative_root / name
                if self.rules.file_ignored(name):
                    result.ignored_files.append(relative_file)
                else:
                    result.files.append(relative_file)

        self.logger.debug(f"Scanned {source}: {result.scanned} files, "
                          f"{len(result.ignored_folders)} folders ignored")
        return result


def _is_link_loop(path: str, real_parent: str) -> bool:
    """Check whether a folder is a symbolic link to itself or one of its ancestors."""
    if not os.path.islink(path):
        return False
    real = os.path.realpath(path)
    return real == real_parent or real_parent.startswith(real.rstrip(os.sep) + os.sep)
