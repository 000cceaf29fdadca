"""Append-only audit log of import batches."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol

from jira_rea_sync.jira.models import WorklogCandidate
from jira_rea_sync.utils.storage import DEFAULT_CONFIG_DIR

logger = logging.getLogger(__name__)


@dataclass
class AuditRecord:
    """Outcome of one import batch."""

    user_id: str
    project_id: str
    entries: list[WorklogCandidate]
    success: bool
    error: str | None = None
    timestamp: datetime = field(default_factory=datetime.now)


class AuditSink(Protocol):
    """Receives one record per import batch."""

    def record(self, record: AuditRecord) -> None: ...


def format_record(record: AuditRecord) -> str:
    """Render a record as a text block."""
    lines = [
        "-" * 80,
        f"Timestamp: {record.timestamp:%Y-%m-%d %H:%M:%S}",
        f"Result: {'Success' if record.success else 'Failure'}",
        f"User ID: {record.user_id}",
        f"Project ID: {record.project_id}",
        f"Entry Count: {len(record.entries)}",
    ]
    for index, entry in enumerate(record.entries, 1):
        lines.append(
            f"#{index} | Issue: {entry.issue_key} | Task: {entry.task} | "
            f"Start: {entry.start:%Y-%m-%d %H:%M} | End: {entry.end:%Y-%m-%d %H:%M} | "
            f"Effort: {entry.effort_hours:g} | Comment: {entry.comment}"
        )
    if not record.success and record.error:
        lines.append(f"Error: {record.error}")
    return "\n".join(lines) + "\n\n"


class FileAuditLog:
    """Audit sink appending text blocks to a log file.

    Writing is best effort: failures are logged and never interrupt an import.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize audit log.

        Args:
            path: Log file. Defaults to ~/.jira-rea-sync/import.log
        """
        self.path = path or DEFAULT_CONFIG_DIR / "import.log"

    def record(self, record: AuditRecord) -> None:
        """Append a record to the log file."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(format_record(record))
        except OSError as e:
            logger.warning(f"Could not write import audit log {self.path}: {e}")
