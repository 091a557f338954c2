"""Plain text and JSON rendering of backup results."""

from typing import Any, Dict, List

import click

from ..core.models import RunStatus, RunSummary, TargetReport
from ..utils.formatters import format_date, format_duration, format_file_size, format_path_relative

STATUS_COLORS = {
    RunStatus.SUCCESS: 'green',
    RunStatus.PARTIAL_FAILURE: 'red',
    RunStatus.NOTHING_SELECTED: 'yellow',
}


class TextReporter:
    """Renders run summaries for the console."""

    def __init__(self, color: bool = True, max_failures: int = 20):
        """Initialize text reporter.

        Args:
            color: Whether to emit ANSI colors.
            max_failures: Maximum number of failures listed per target.
        """
        self.color = color
        self.max_failures = max_failures

    def _style(self, text: str, fg: str, bold: bool = False) -> str:
        if not self.color:
            return text
        return click.style(text, fg=fg, bold=bold)

    def render_target(self, report: TargetReport) -> str:
        """Render the result of one target as a few lines of text."""
        target = report.target
        lines = []

        if report.error:
            status = self._style("FAILED", 'red', bold=True)
        elif report.failed:
            status = self._style("PARTIAL", 'yellow', bold=True)
        else:
            status = self._style("OK", 'green', bold=True)
        lines.append(f"[{status}] {target.display_name}")

        if report.destination is not None:
            lines.append(f"  Destination: {report.destination}")
        lines.append(
            f"  Files: {report.scanned} scanned, {report.copied} copied "
            f"({format_file_size(report.bytes_copied)}), "
            f"{report.skipped_unchanged} unchanged, {report.skipped_ignored} ignored, "
            f"{report.failed} failed"
        )
        if report.ignored_folders:
            lines.append(f"  Ignored folders: {report.ignored_folders}")
        if report.pruned:
            lines.append(f"  Removed snapshots: {', '.join(p.name for p in report.pruned)}")
        if report.error:
            lines.append(f"  Error: {report.error}")

        for path, error in report.failures[:self.max_failures]:
            shown = format_path_relative(path, target.source_path)
            lines.append(f"    - {shown}: {error}")
        hidden = len(report.failures) - self.max_failures
        if hidden > 0:
            lines.append(f"    ... and {hidden} more")

        return "\n".join(lines)

    def render_summary(self, summary: RunSummary) -> str:
        """Render the aggregate status of a run."""
        status = summary.status
        if status == RunStatus.NOTHING_SELECTED:
            return self._style(f"No targets matching '{summary.selector}'!", STATUS_COLORS[status])

        succeeded = sum(1 for report in summary.reports if report.succeeded)
        lines = [
            "",
            "Summary:",
            "=" * 50,
            f"Started: {format_date(summary.started_at)}",
            f"Targets: {len(summary.reports)} ({succeeded} succeeded)",
            f"Files copied: {summary.total_copied} ({format_file_size(summary.total_bytes)})",
            f"Files failed: {summary.total_failed}",
            f"Duration: {format_duration(summary.started_at, summary.finished_at)}",
            f"Status: {self._style(status.value, STATUS_COLORS[status], bold=True)}",
        ]
        return "\n".join(lines)

    def render(self, summary: RunSummary) -> str:
        parts = [self.render_target(report) for report in summary.reports]
        parts.append(self.render_summary(summary))
        return "\n".join(parts)


def summary_to_dict(summary: RunSummary) -> Dict[str, Any]:
    """Convert a run summary to a JSON-serializable dictionary."""
    targets: List[Dict[str, Any]] = []
    for report in summary.reports:
        targets.append({
            'tag': report.target.tag,
            'source': str(report.target.source_path),
            'destination': str(report.destination) if report.destination else None,
            'keep_num': report.target.keep_num,
            'scanned': report.scanned,
            'copied': report.copied,
            'skipped_unchanged': report.skipped_unchanged,
            'skipped_ignored': report.skipped_ignored,
            'ignored_folders': report.ignored_folders,
            'failed': report.failed,
            'bytes_copied': report.bytes_copied,
            'failures': [{'path': path, 'error': error} for path, error in report.failures],
            'pruned': [str(path) for path in report.pruned],
            'error': report.error,
            'started_at': report.started_at.isoformat() if report.started_at else None,
            'finished_at': report.finished_at.isoformat() if report.finished_at else None,
        })

    return {
        'selector': summary.selector,
        'status': summary.status.value,
        'exit_code': summary.exit_code,
        'started_at': summary.started_at.isoformat() if summary.started_at else None,
        'finished_at': summary.finished_at.isoformat() if summary.finished_at else None,
        'total_copied': summary.total_copied,
        'total_failed': summary.total_failed,
        'targets': targets,
    }
