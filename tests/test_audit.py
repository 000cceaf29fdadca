"""Tests for the import audit log."""

from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from jira_rea_sync.jira import WorklogCandidate
from jira_rea_sync.utils.audit import AuditRecord, FileAuditLog, format_record


class TestAuditLog:
    """Test audit record formatting and writing."""

    def test_format_success(self, make_candidate: Callable[..., WorklogCandidate]) -> None:
        """Test the text block of a successful batch."""
        record = AuditRecord(
            user_id="42",
            project_id="P1",
            entries=[make_candidate(hours=1.5)],
            success=True,
            timestamp=datetime(2024, 5, 2, 8, 15, 0),
        )

        text = format_record(record)

        assert text.startswith("-" * 80 + "\n")
        assert "Timestamp: 2024-05-02 08:15:00" in text
        assert "Result: Success" in text
        assert "Entry Count: 1" in text
        assert "#1 | Issue: ABC-1 | Task: ABC-1 - Fix bug | Start: 2024-05-01 09:00" in text
        assert "Effort: 1.5 | Comment: work" in text
        assert "Error:" not in text

    def test_format_failure(self) -> None:
        """Test that failures include the error."""
        record = AuditRecord("42", "P1", [], success=False, error="500 Internal Server Error")

        text = format_record(record)

        assert "Result: Failure" in text
        assert "Error: 500 Internal Server Error" in text

    def test_file_log_appends(
        self, temp_config_dir: Path, make_candidate: Callable[..., WorklogCandidate]
    ) -> None:
        """Test that records accumulate in the file."""
        log = FileAuditLog(temp_config_dir / "logs" / "import.log")

        log.record(AuditRecord("42", "P1", [make_candidate()], success=True))
        log.record(AuditRecord("42", "P1", [], success=False, error="boom"))

        content = log.path.read_text(encoding="utf-8")
        assert content.count("-" * 80) == 2
        assert "Error: boom" in content

    def test_file_log_errors_are_swallowed(self, temp_config_dir: Path) -> None:
        """Test that an unwritable path does not raise."""
        blocker = temp_config_dir / "not-a-dir"
        blocker.write_text("", encoding="utf-8")

        FileAuditLog(blocker / "import.log").record(AuditRecord("42", "P1", [], success=True))
