"""Report renderers for backup-rat."""

from .text_reporter import TextReporter, summary_to_dict

__all__ = ["TextReporter", "summary_to_dict"]
