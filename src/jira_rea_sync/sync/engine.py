"""Reconciliation of Jira worklog candidates against existing Rea time entries."""

import logging
import threading
from collections.abc import Iterable
from itertools import chain

from jira_rea_sync.errors import (
    AuthenticationError,
    ImportAborted,
    OperationCancelled,
    RemoteError,
    SyncError,
)
from jira_rea_sync.jira.models import WorklogCandidate
from jira_rea_sync.rea.models import ReaTimeEntry
from jira_rea_sync.sync.cache import DateRangeKey
from jira_rea_sync.sync.session import SyncSession
from jira_rea_sync.utils.audit import AuditRecord, AuditSink
from jira_rea_sync.utils.http import check_cancelled

logger = logging.getLogger(__name__)

# The portal may round efforts differently than Jira does.
EFFORT_TOLERANCE = 0.01


class ImportResult:
    """Results from an import batch."""

    def __init__(self) -> None:
        """Initialize import result."""
        self.sent = 0
        self.skipped = 0
        self.warnings: list[str] = []

    def add_sent(self) -> None:
        """Record a submitted entry."""
        self.sent += 1

    def add_skip(self) -> None:
        """Record an entry skipped as already present."""
        self.skipped += 1

    def add_warning(self, message: str) -> None:
        """Record a non-fatal problem."""
        self.warnings.append(message)

    def __str__(self) -> str:
        """String representation of results."""
        return f"Sent: {self.sent}, Skipped: {self.skipped}"


def _normalize(value: str | None) -> str:
    return (value or "").strip().casefold()


def texts_equal(left: str | None, right: str | None) -> bool:
    """Compare texts ignoring case and surrounding whitespace."""
    return _normalize(left) == _normalize(right)


def efforts_equal(left: float, right: float) -> bool:
    """Compare hours within EFFORT_TOLERANCE."""
    return abs(left - right) <= EFFORT_TOLERANCE


def is_duplicate(
    candidate: WorklogCandidate,
    existing_entries: Iterable[ReaTimeEntry],
    user_id: str,
    project_id: str,
) -> bool:
    """Check whether a candidate already exists among the portal's entries.

    An entry matches when user, project, task, comment, start day, end day and effort
    all match.

    Args:
        candidate: Worklog to import.
        existing_entries: Entries known to exist in the portal.
        user_id: Portal user the candidate would be filed for.
        project_id: Portal project the candidate would be filed under.

    Returns:
        True if a matching entry exists.
    """
    start_day = candidate.start.date()
    end_day = candidate.end.date()

    for existing in existing_entries:
        if not texts_equal(existing.user_id, user_id):
            continue
        if not texts_equal(existing.project_id, project_id):
            continue
        if not texts_equal(existing.task, candidate.task):
            continue
        if not texts_equal(existing.comment, candidate.comment):
            continue
        if existing.start_date != start_day or existing.end_date != end_day:
            continue
        if efforts_equal(existing.effort, candidate.effort_hours):
            return True

    return False


def to_time_entry(candidate: WorklogCandidate, user_id: str, project_id: str) -> ReaTimeEntry:
    """Build the unsaved portal entry for a candidate, with day granularity dates."""
    return ReaTimeEntry(
        id=0,
        user_id=user_id,
        project_id=project_id,
        task=candidate.task,
        start_date=candidate.start.date(),
        end_date=candidate.end.date(),
        effort=candidate.effort_hours,
        comment=candidate.comment,
    )


class ReconciliationEngine:
    """Imports worklog candidates into the Rea portal without creating duplicates."""

    def __init__(self, audit: AuditSink | None = None) -> None:
        """Initialize reconciliation engine.

        Args:
            audit: Receives the outcome of every import batch.
        """
        self.audit = audit

    def refresh_existing(
        self,
        session: SyncSession,
        range_key: DateRangeKey,
        force_refresh: bool = False,
        cancel: threading.Event | None = None,
    ) -> list[ReaTimeEntry]:
        """Load the portal entries of a range into the session cache.

        Does nothing and returns an empty list when the session has no portal user.

        Args:
            session: Session whose cache to fill.
            range_key: Date range.
            force_refresh: Reload even if the range is cached.
            cancel: Optional cancellation signal.

        Returns:
            Cached entries of the range.
        """
        user_id = session.rea_user_id
        if not session.rea.is_authenticated or not user_id:
            return []

        return session.cache.ensure(
            range_key,
            lambda key: session.rea.list_time_entries(user_id, cancel=cancel),
            force_refresh=force_refresh,
        )

    def import_batch(
        self,
        session: SyncSession,
        candidates: Iterable[WorklogCandidate],
        user_id: str,
        project_id: str,
        range_key: DateRangeKey,
        cancel: threading.Event | None = None,
        dry_run: bool = False,
    ) -> ImportResult:
        """Submit the candidates not yet present in the portal.

        The range is re-fetched once before the loop. Every submitted entry is remembered
        (in the cached list when it overlaps the range) so a later candidate duplicating
        it is skipped too. The batch is not transactional: a failed submission stops
        the batch, and entries sent before it stay sent.

        Args:
            session: Session with a logged in portal client.
            candidates: Worklogs to import, processed in order.
            user_id: Portal user to file the entries for.
            project_id: Portal project to file the entries under.
            range_key: Date range the candidates were fetched for.
            cancel: Optional cancellation signal checked between candidates.
            dry_run: If True, only report what would be sent.

        Returns:
            Counts of sent and skipped candidates, plus warnings.

        Raises:
            ValueError: If user_id or project_id is blank.
            AuthenticationError: If the portal client has no session.
            ImportAborted: If a submission failed; carries the partial result.
            OperationCancelled: If cancel is set or a submission is declined during the
                batch; carries the partial result.
        """
        if not user_id or not user_id.strip():
            raise ValueError("Rea user id is required")
        if not project_id or not project_id.strip():
            raise ValueError("Rea project id is required")
        if not session.rea.is_authenticated:
            raise AuthenticationError("Login to the Rea portal before importing")

        user_id = user_id.strip()
        project_id = project_id.strip()
        candidates = list(candidates)
        result = ImportResult()

        logger.info(
            f"Importing {len(candidates)} worklogs into project {project_id} for {range_key}"
            + (" [DRY RUN]" if dry_run else "")
        )

        try:
            existing = session.cache.ensure(
                range_key,
                lambda key: session.rea.list_time_entries(user_id, cancel=cancel),
                force_refresh=True,
                on_warning=result.add_warning,
            )
            # Submissions the cached list does not hold: dry runs, entries outside the
            # range, or a range dropped after a failed refresh.
            submitted: list[ReaTimeEntry] = []

            for candidate in candidates:
                check_cancelled(cancel)

                if is_duplicate(candidate, chain(existing, submitted), user_id, project_id):
                    logger.debug(f"Already in Rea portal: {candidate.task} on {candidate.start:%Y-%m-%d}")
                    result.add_skip()
                    continue

                entry = to_time_entry(candidate, user_id, project_id)

                if dry_run:
                    logger.info(
                        f"[DRY RUN] Would create entry: {entry.task} -> "
                        f"{entry.effort}h on {entry.start_date}"
                    )
                    result.add_sent()
                    submitted.append(entry)
                    continue

                try:
                    session.rea.create_time_entry(entry, cancel=cancel)
                except RemoteError as e:
                    raise ImportAborted(e, result) from e

                result.add_sent()
                logger.info(f"Created Rea entry: {entry.task} -> {entry.effort}h on {entry.start_date}")

                if not session.cache.append(range_key, entry):
                    submitted.append(entry)

        except SyncError as e:
            if isinstance(e, OperationCancelled):
                e.result = result
            logger.error(f"Import stopped ({result}): {e}")
            if not dry_run:
                self._record(AuditRecord(user_id, project_id, candidates, success=False, error=str(e)))
            raise

        logger.info(f"Import complete: {result}")
        if not dry_run:
            self._record(AuditRecord(user_id, project_id, candidates, success=True))
        return result

    def _record(self, record: AuditRecord) -> None:
        if self.audit is None:
            return
        try:
            self.audit.record(record)
        except Exception as e:
            logger.warning(f"Failed to write import audit record: {e}")
