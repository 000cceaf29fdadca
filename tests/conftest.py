"""Pytest configuration and fixtures."""

import tempfile
from collections.abc import Callable
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from jira_rea_sync.config import Config
from jira_rea_sync.jira import JiraClient, WorklogCandidate
from jira_rea_sync.rea import ReaClient, ReaTimeEntry
from jira_rea_sync.sync import DateRangeKey, SyncSession
from jira_rea_sync.utils import StorageManager


@pytest.fixture
def temp_config_dir() -> Path:
    """Create a temporary configuration directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def storage_manager(temp_config_dir: Path) -> StorageManager:
    """Create a storage manager with temporary directory."""
    return StorageManager(temp_config_dir)


@pytest.fixture
def config(temp_config_dir: Path) -> Config:
    """Create a config instance with temporary directory."""
    return Config(temp_config_dir)


@pytest.fixture
def make_candidate() -> Callable[..., WorklogCandidate]:
    """Factory for worklog candidates; defaults describe a 3 hour worklog on 2024-05-01."""

    def factory(
        task: str = "ABC-1 - Fix bug",
        start: datetime = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc),
        hours: float = 3.0,
        comment: str = "work",
    ) -> WorklogCandidate:
        issue_key, _, summary = task.partition(" - ")
        return WorklogCandidate(
            issue_key=issue_key,
            issue_summary=summary,
            task=task,
            start=start,
            end=start + timedelta(hours=hours),
            effort_hours=hours,
            comment=comment,
        )

    return factory


@pytest.fixture
def sample_time_entry() -> ReaTimeEntry:
    """Create a persisted Rea time entry matching the default candidate."""
    return ReaTimeEntry(
        id=7,
        user_id="42",
        project_id="P1",
        task="ABC-1 - Fix bug",
        start_date=date(2024, 5, 1),
        end_date=date(2024, 5, 1),
        effort=3.0,
        comment="work",
    )


@pytest.fixture
def range_key() -> DateRangeKey:
    """May 2024."""
    return DateRangeKey(date(2024, 5, 1), date(2024, 5, 31))


@pytest.fixture
def portal_entries() -> list[ReaTimeEntry]:
    """Entries stored by the fake portal behind mock_rea."""
    return []


@pytest.fixture
def mock_rea(portal_entries: list[ReaTimeEntry]) -> MagicMock:
    """Create a mock ReaClient backed by portal_entries.

    Created entries are stored with a fresh id and returned by later listings.
    """
    mock_client = MagicMock(spec=ReaClient)
    mock_client.is_authenticated = True

    def create(entry: ReaTimeEntry, cancel: object = None) -> None:
        portal_entries.append(entry.model_copy(update={"id": len(portal_entries) + 1}))

    mock_client.list_time_entries.side_effect = lambda user_id, cancel=None: list(portal_entries)
    mock_client.create_time_entry.side_effect = create
    return mock_client


@pytest.fixture
def session(mock_rea: MagicMock) -> SyncSession:
    """Create a session logged into the fake portal as user 42."""
    sync_session = SyncSession(jira=MagicMock(spec=JiraClient), rea=mock_rea)
    sync_session.rea_user_id = "42"
    return sync_session
