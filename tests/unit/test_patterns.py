"""
Unit tests for ignore patterns (backup_rat/core/patterns.py).

Tests pattern compilation, matching and the per-target IgnoreRules.
"""

import pytest

from backup_rat.core.exceptions import InvalidPattern
from backup_rat.core.models import LiteralPattern, RegexPattern
from backup_rat.core.patterns import IgnoreRules, compile_pattern, compile_patterns, matches


class TestCompilePattern:
    """Test compilation of raw config strings."""

    def test_plain_string_is_literal(self):
        """Test a string without prefix compiles to a literal."""
        pattern = compile_pattern("Thumbs.db")

        assert isinstance(pattern, LiteralPattern)
        assert pattern.text == "Thumbs.db"

    def test_prefixed_string_is_regex(self):
        """Test the r# prefix compiles to a regex without the prefix."""
        pattern = compile_pattern(r"r#\.tmp$")

        assert isinstance(pattern, RegexPattern)
        assert pattern.source == r"\.tmp$"

    def test_invalid_regex_raises(self):
        """Test a malformed regex raises InvalidPattern."""
        with pytest.raises(InvalidPattern, match="Invalid ignore pattern"):
            compile_pattern("r#([unclosed")

    def test_invalid_regex_keeps_raw_text(self):
        """Test InvalidPattern carries the offending raw rule."""
        with pytest.raises(InvalidPattern) as exc_info:
            compile_pattern("r#*")

        assert exc_info.value.raw == "r#*"

    def test_regex_metacharacters_in_literal_are_not_special(self):
        """Test a literal with regex characters only matches itself."""
        pattern = compile_pattern("*.log")

        assert matches(pattern, "*.log") is True
        assert matches(pattern, "a.log") is False

    def test_non_string_raises(self):
        """Test non-string rules are rejected."""
        with pytest.raises(InvalidPattern):
            compile_pattern(42)

    def test_compile_patterns_preserves_order(self):
        """Test a sequence compiles in order."""
        patterns = compile_patterns(["a", "r#b", "c"])

        assert [type(p) for p in patterns] == [LiteralPattern, RegexPattern, LiteralPattern]


class TestMatches:
    """Test matching of compiled patterns."""

    def test_literal_matches_exactly(self):
        """Test literal equality, no substring or case folding."""
        pattern = compile_pattern("build")

        assert matches(pattern, "build") is True
        assert matches(pattern, "build2") is False
        assert matches(pattern, "Build") is False
        assert matches(pattern, "src/build") is False

    def test_regex_uses_search(self):
        """Test regexes match anywhere in the candidate."""
        pattern = compile_pattern("r#cache")

        assert matches(pattern, "cache") is True
        assert matches(pattern, "build/cache") is True
        assert matches(pattern, "src") is False

    def test_anchored_regex(self):
        """Test anchors restrict regex matches."""
        pattern = compile_pattern(r"r#^\.git$")

        assert matches(pattern, ".git") is True
        assert matches(pattern, "sub/.git") is False


class TestIgnoreRules:
    """Test the combined file and folder rules of a target."""

    def test_file_rules_apply_to_base_name(self):
        """Test file rules see base names."""
        rules = IgnoreRules(ignore_files=compile_patterns(["b.log", r"r#\.tmp$"]))

        assert rules.file_ignored("b.log") is True
        assert rules.file_ignored("x.tmp") is True
        assert rules.file_ignored("a.txt") is False

    def test_folder_rules_apply_to_relative_path(self):
        """Test literal folder rules match the path relative to the source."""
        rules = IgnoreRules(ignore_folders=compile_patterns(["build", "docs/deep"]))

        assert rules.folder_ignored("build") is True
        assert rules.folder_ignored("docs/deep") is True
        assert rules.folder_ignored("deep") is False
        assert rules.folder_ignored("src/build") is False

    def test_folder_rules_do_not_affect_files(self):
        """Test file and folder rules are independent."""
        rules = IgnoreRules(ignore_folders=compile_patterns(["a.txt"]))

        assert rules.file_ignored("a.txt") is False

    def test_no_rules_ignore_nothing(self):
        """Test empty rules."""
        rules = IgnoreRules()

        assert rules.file_ignored("anything") is False
        assert rules.folder_ignored("anything") is False

    def test_for_target(self, make_target, tmp_path):
        """Test rules are taken from a target."""
        target = make_target(tmp_path, tmp_path, ignore_files=["x"], ignore_folders=["y"])
        rules = IgnoreRules.for_target(target)

        assert rules.file_ignored("x") is True
        assert rules.folder_ignored("y") is True
