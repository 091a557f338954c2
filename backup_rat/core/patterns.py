"""Ignore-pattern compilation and matching."""

import re
from typing import Iterable, Sequence, Tuple

from .exceptions import InvalidPattern
from .models import LiteralPattern, Pattern, RegexPattern

REGEX_PREFIX = "r#"


def compile_pattern(raw: str) -> Pattern:
    """Compile a raw ignore rule from the configuration.

    Args:
        raw: Rule text. A leading ``r#`` marks a regular expression,
            anything else is matched literally.

    Returns:
        A LiteralPattern or RegexPattern.

    Raises:
        InvalidPattern: If the rule is a malformed regular expression.
    """
    if not isinstance(raw, str):
        raise InvalidPattern(repr(raw), "pattern must be a string")

    if raw.startswith(REGEX_PREFIX):
        expression = raw[len(REGEX_PREFIX):]
        try:
            return RegexPattern(source=expression, compiled=re.compile(expression))
        except re.error as e:
            raise InvalidPattern(raw, str(e))

    return LiteralPattern(text=raw)


def compile_patterns(raws: Iterable[str]) -> Tuple[Pattern, ...]:
    """Compile a sequence of raw rules, preserving order."""
    return tuple(compile_pattern(raw) for raw in raws)


def matches(pattern: Pattern, candidate: str) -> bool:
    """Check whether a candidate string matches a compiled pattern."""
    if isinstance(pattern, RegexPattern):
        return pattern.compiled.search(candidate) is not None
    return pattern.text == candidate


def matches_any(patterns: Sequence[Pattern], candidate: str) -> bool:
    return any(matches(pattern, candidate) for pattern in patterns)


class IgnoreRules:
    """Folder and file exclusion rules of one target."""

    def __init__(self, ignore_files: Sequence[Pattern] = (),
                 ignore_folders: Sequence[Pattern] = ()):
        self.ignore_files = tuple(ignore_files)
        self.ignore_folders = tuple(ignore_folders)

    @classmethod
    def for_target(cls, target) -> "IgnoreRules":
        return cls(target.ignore_files, target.ignore_folders)

    def folder_ignored(self, relative_path: str) -> bool:
        """Check a folder path, relative to the source root with ``/`` separators."""
        return matches_any(self.ignore_folders, relative_path)

    def file_ignored(self, name: str) -> bool:
        """Check a file's base name."""
        return matches_any(self.ignore_files, name)
