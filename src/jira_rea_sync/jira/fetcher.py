"""Extraction of a user's Jira worklogs as import candidates."""

import logging
import re
import threading
from datetime import date, datetime, timedelta, timezone, tzinfo
from decimal import ROUND_HALF_UP, Decimal

from jira_rea_sync.errors import AuthenticationError, RangeError
from jira_rea_sync.jira.client import JiraClient
from jira_rea_sync.jira.models import JiraCommentNode, JiraIssue, JiraWorklog, WorklogCandidate

logger = logging.getLogger(__name__)

# Jira sends offsets without a colon, e.g. 2024-05-01T09:00:00.000+0000
_COMPACT_OFFSET = re.compile(r"([+-]\d{2})(\d{2})$")


def parse_jira_datetime(value: str) -> datetime | None:
    """Parse a Jira timestamp into an aware datetime.

    Timestamps without an offset are taken as UTC.

    Args:
        value: Timestamp such as '2024-05-01T09:00:00.000+0000'.

    Returns:
        Aware datetime, or None if the value cannot be parsed.
    """
    text = (value or "").strip()
    if not text:
        return None

    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    text = _COMPACT_OFFSET.sub(r"\1:\2", text)

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def seconds_to_hours(seconds: int) -> float:
    """Convert seconds to hours rounded to 2 decimals, halves away from zero.

    Args:
        seconds: Logged duration in seconds.

    Returns:
        Hours, e.g. 5400 -> 1.5.
    """
    hours = Decimal(seconds) / Decimal(3600)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def _collect_text(nodes: list[JiraCommentNode], parts: list[str]) -> None:
    for node in nodes:
        if node.text and node.text.strip():
            parts.append(node.text)
        if node.content:
            _collect_text(node.content, parts)


def extract_comment_text(comment: JiraCommentNode | str | None) -> str | None:
    """Flatten a worklog comment into plain text.

    Text leaves of the document tree are concatenated depth-first and joined with single spaces.

    Args:
        comment: Document tree, plain string (older API versions) or None.

    Returns:
        Plain text, or None when the comment has no text.
    """
    if comment is None:
        return None
    if isinstance(comment, str):
        return comment.strip() or None

    parts: list[str] = []
    _collect_text([comment], parts)
    text = " ".join(parts).strip()
    return text or None


def _as_date(value: date) -> date:
    return value.date() if isinstance(value, datetime) else value


class WorklogFetcher:
    """Builds import candidates from the worklogs of one Jira author."""

    def __init__(self, client: JiraClient, timezone: tzinfo | None = None) -> None:
        """Initialize worklog fetcher.

        Args:
            client: Authenticated Jira client.
            timezone: Zone used to decide which day a worklog belongs to. Defaults to the
                local zone of the machine.
        """
        self.client = client
        self.timezone = timezone

    def fetch(
        self,
        author_id: str | None,
        start_date: date,
        end_date: date,
        cancel: threading.Event | None = None,
    ) -> list[WorklogCandidate]:
        """Fetch an author's worklogs started within a window of days.

        Args:
            author_id: Jira account ID to keep. Defaults to the authenticated account.
            start_date: First day (inclusive). Datetimes are truncated to the day.
            end_date: Last day (inclusive). Datetimes are truncated to the day.
            cancel: Optional cancellation signal checked before each request.

        Returns:
            Candidates ordered by start time.

        Raises:
            AuthenticationError: If the Jira client has no session.
            RangeError: If end_date is before start_date.
            RemoteError: If any Jira request fails.
            OperationCancelled: If cancel is set while fetching.
        """
        if not self.client.is_authenticated:
            raise AuthenticationError("Log into Jira before retrieving worklogs")

        first_day = _as_date(start_date)
        last_day = _as_date(end_date)
        if last_day < first_day:
            raise RangeError(f"End date {last_day} is before start date {first_day}")

        author = author_id or self.client.account_id
        issues = self.client.search_issues_with_worklog_in_range(first_day, last_day, cancel=cancel)
        logger.info(f"Found {len(issues)} Jira issues with worklogs from {first_day} to {last_day}")

        candidates: list[WorklogCandidate] = []
        for issue in issues:
            worklogs = self.client.get_issue_worklogs(issue.key, cancel=cancel)
            for worklog in worklogs:
                candidate = self._to_candidate(issue, worklog, author, first_day, last_day)
                if candidate is not None:
                    candidates.append(candidate)

        candidates.sort(key=lambda c: c.start)
        logger.info(f"Collected {len(candidates)} worklogs")
        return candidates

    def _to_candidate(
        self,
        issue: JiraIssue,
        worklog: JiraWorklog,
        author_id: str | None,
        first_day: date,
        last_day: date,
    ) -> WorklogCandidate | None:
        # The issue search is day-granular, so worklogs of other authors or outside
        # the window come back as well.
        if worklog.author.account_id != author_id:
            return None

        started = parse_jira_datetime(worklog.started)
        if started is None:
            logger.debug(f"Skipping worklog {worklog.id} of {issue.key}: bad start '{worklog.started}'")
            return None

        local_start = started.astimezone(self.timezone)
        if not first_day <= local_start.date() <= last_day:
            return None

        seconds = max(worklog.time_spent_seconds, 0)
        summary = issue.summary
        return WorklogCandidate(
            issue_key=issue.key,
            issue_summary=summary,
            task=f"{issue.key} - {summary}",
            start=local_start,
            end=local_start + timedelta(seconds=seconds),
            effort_hours=seconds_to_hours(seconds),
            comment=extract_comment_text(worklog.comment) or summary,
            jira_worklog_id=worklog.id or None,
        )
