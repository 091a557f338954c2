"""
Unit tests for source walking (backup_rat/core/scanner.py).
"""

import os
from pathlib import PurePosixPath
from unittest.mock import patch

from backup_rat.core.patterns import IgnoreRules, compile_patterns
from backup_rat.core.scanner import SourceScanner


def rules(files=(), folders=()):
    return IgnoreRules(compile_patterns(files), compile_patterns(folders))


def names(paths):
    return sorted(str(p) for p in paths)


class TestSourceScanner:
    """Test SourceScanner directory walking."""

    def test_collects_all_files(self, source_tree):
        """Test every file is found, relative to the root."""
        result = SourceScanner(rules()).scan(source_tree)

        assert names(result.files) == [
            "a.txt",
            "build/cache/tmp.bin",
            "build/out.o",
            "docs/deep/guide.txt",
            "docs/readme.md",
            "notes.log",
        ]
        assert result.scanned == 6
        assert result.errors == []

    def test_ignored_folder_prunes_subtree(self, source_tree):
        """Test an ignored folder and everything below it is skipped."""
        result = SourceScanner(rules(folders=["build"])).scan(source_tree)

        assert not any(str(p).startswith("build") for p in result.files)
        assert result.ignored_folders == [PurePosixPath("build")]
        # Files below ignored folders are never listed, so not counted
        assert result.scanned == 4

    def test_pruned_folder_is_not_walked(self, source_tree):
        """Test os.walk never descends into an ignored folder."""
        visited = []
        real_walk = os.walk

        def recording_walk(top, *args, **kwargs):
            for root, dirs, files in real_walk(top, *args, **kwargs):
                visited.append(root)
                yield root, dirs, files

        with patch('backup_rat.core.scanner.os.walk', side_effect=recording_walk):
            SourceScanner(rules(folders=["build"])).scan(source_tree)

        assert visited
        assert not any(os.path.relpath(root, source_tree).startswith("build") for root in visited)

    def test_nested_folder_matches_relative_path(self, source_tree):
        """Test literal folder rules are matched against the relative path."""
        result = SourceScanner(rules(folders=["deep"])).scan(source_tree)
        assert "docs/deep/guide.txt" in names(result.files)

        result = SourceScanner(rules(folders=["docs/deep"])).scan(source_tree)
        assert "docs/deep/guide.txt" not in names(result.files)
        assert "docs/readme.md" in names(result.files)

    def test_regex_folder_rule(self, source_tree):
        """Test regex folder rules match anywhere in the relative path."""
        result = SourceScanner(rules(folders=["r#cache$"])).scan(source_tree)

        assert "build/cache/tmp.bin" not in names(result.files)
        assert "build/out.o" in names(result.files)

    def test_file_rules_match_base_names(self, source_tree):
        """Test file rules apply at any depth."""
        result = SourceScanner(rules(files=["guide.txt", r"r#\.log$"])).scan(source_tree)

        assert names(result.ignored_files) == ["docs/deep/guide.txt", "notes.log"]
        assert result.scanned == 6

    def test_single_file_source(self, source_tree):
        """Test a file source yields just that file."""
        result = SourceScanner(rules()).scan(source_tree / "a.txt")

        assert result.files == [PurePosixPath("a.txt")]

    def test_single_file_source_ignored(self, source_tree):
        """Test a file source can itself be ignored."""
        result = SourceScanner(rules(files=["a.txt"])).scan(source_tree / "a.txt")

        assert result.files == []
        assert result.ignored_files == [PurePosixPath("a.txt")]

    def test_symlinked_folder_is_walked(self, source_tree, tmp_path):
        """Test a symbolic link to a folder outside the source is descended into."""
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "x.txt").write_text("x")
        (source_tree / "linked").symlink_to(outside, target_is_directory=True)

        result = SourceScanner(rules()).scan(source_tree)

        assert "linked/x.txt" in names(result.files)
        assert result.errors == []

    def test_symlink_loop_is_reported(self, source_tree):
        """Test a link back to an ancestor is reported instead of walked forever."""
        (source_tree / "docs" / "loop").symlink_to(source_tree, target_is_directory=True)

        result = SourceScanner(rules()).scan(source_tree)

        assert result.scanned == 6
        assert result.errors == [(str(source_tree / "docs" / "loop"), "Symbolic link loop, not followed")]

    def test_unreadable_directory_is_reported(self, source_tree):
        """Test walk errors are collected instead of dropped."""
        def failing_walk(top, onerror=None, **kwargs):
            onerror(PermissionError(13, "Permission denied", str(top / "secret")))
            yield str(top), [], ["a.txt"]

        with patch('backup_rat.core.scanner.os.walk', side_effect=failing_walk):
            result = SourceScanner(rules()).scan(source_tree)

        assert result.errors == [(str(source_tree / "secret"), "Permission denied")]
        assert result.files == [PurePosixPath("a.txt")]
