"""
Shared pytest fixtures for backup-rat tests.

This module provides fixtures for:
- Source trees with a known layout
- Destination roots
- A factory for Target objects built from raw config values
- Helpers to control file modification times
"""

import os
import time
from pathlib import Path

import pytest

from backup_rat.core.models import GlobalSettings, Target
from backup_rat.core.patterns import compile_patterns


@pytest.fixture(scope='function')
def source_tree(tmp_path):
    """
    Create a source directory with a small nested layout.

    data/
        a.txt
        notes.log
        docs/readme.md
        docs/deep/guide.txt
        build/out.o
        build/cache/tmp.bin
    """
    root = tmp_path / "data"
    (root / "docs" / "deep").mkdir(parents=True)
    (root / "build" / "cache").mkdir(parents=True)

    (root / "a.txt").write_text("alpha")
    (root / "notes.log").write_text("log line")
    (root / "docs" / "readme.md").write_text("# readme")
    (root / "docs" / "deep" / "guide.txt").write_text("guide")
    (root / "build" / "out.o").write_bytes(b"\x00\x01")
    (root / "build" / "cache" / "tmp.bin").write_bytes(b"\x02")

    return root


@pytest.fixture(scope='function')
def dest_root(tmp_path):
    """Existing, empty destination root."""
    root = tmp_path / "backup"
    root.mkdir()
    return root


@pytest.fixture(scope='function')
def make_target():
    """
    Factory for Target objects.

    Ignore patterns are given as raw config strings and compiled the same way
    the configuration loader does.
    """
    def _make(source, destination, ignore_files=(), ignore_folders=(), **kwargs):
        return Target(
            source_path=Path(source),
            destination_root=Path(destination),
            ignore_files=compile_patterns(ignore_files),
            ignore_folders=compile_patterns(ignore_folders),
            **kwargs
        )
    return _make


@pytest.fixture(scope='function')
def settings():
    """Multi-threaded global settings with four workers."""
    return GlobalSettings(multi_threaded=True, thread_count=4, color=False, fancy_text=False)


@pytest.fixture(scope='function')
def set_mtime():
    """Set a file's modification time to ``offset`` seconds from now."""
    def _set(path, offset):
        moment = time.time() + offset
        os.utime(path, (moment, moment))
    return _set


@pytest.fixture(scope='function')
def list_files():
    """List all files under a root, as sorted POSIX paths relative to it."""
    def _list(root):
        root = Path(root)
        return sorted(p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file())
    return _list
