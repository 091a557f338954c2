"""Exceptions raised by the backup engine."""


class BackupError(Exception):
    """Base class for backup engine errors."""


class InvalidPattern(BackupError, ValueError):
    """An ignore pattern prefixed with ``r#`` is not a valid regular expression."""

    def __init__(self, raw: str, reason: str):
        self.raw = raw
        self.reason = reason
        super().__init__(f"Invalid ignore pattern {raw!r}: {reason}")


class SourceUnreadable(BackupError):
    """The source path of a target is missing or cannot be read."""


class DestinationUnwritable(BackupError):
    """The destination of a target is missing or cannot be written to."""


class FileCopyFailed(BackupError):
    """A single file could not be copied."""

    def __init__(self, source: str, destination: str, reason: str):
        self.source = source
        self.destination = destination
        self.reason = reason
        super().__init__(f"Failed to copy {source} to {destination}: {reason}")
