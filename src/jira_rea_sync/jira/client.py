"""Jira Cloud API client."""

import logging
import threading
from datetime import date
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from jira_rea_sync.errors import AuthenticationError, ParseError, RemoteError
from jira_rea_sync.jira.models import (
    JiraIssue,
    JiraMyself,
    JiraSearchResponse,
    JiraWorklog,
    JiraWorklogResponse,
)
from jira_rea_sync.utils.http import send

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse(model: type[ModelT], body: str) -> ModelT:
    try:
        return model.model_validate_json(body)
    except ValidationError as e:
        raise ParseError(f"Unexpected Jira response for {model.__name__}: {e}") from e


def build_jql(start_date: date, end_date: date) -> str:
    """Build the JQL selecting issues the current user logged work on in a window.

    Args:
        start_date: First day of the window (inclusive).
        end_date: Last day of the window (inclusive).

    Returns:
        JQL query string.
    """
    start = start_date.strftime("%Y/%m/%d")
    end = end_date.strftime("%Y/%m/%d")
    return (
        f'worklogAuthor = currentUser() AND worklogDate >= "{start}" '
        f'AND worklogDate <= "{end}"'
    )


class JiraClient:
    """Client for the Jira Cloud REST API (v3)."""

    SEARCH_PAGE_SIZE = 200
    WORKLOG_PAGE_SIZE = 1000

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize Jira client.

        Args:
            base_url: Jira site URL, e.g. 'https://mycompany.atlassian.net/'.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport (used by tests).
        """
        self.client = httpx.Client(
            base_url=base_url,
            headers={"Accept": "application/json"},
            timeout=timeout,
            transport=transport,
        )
        self.account_id: str | None = None
        self.display_name: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Whether login succeeded and the session is still active."""
        return bool(self.account_id)

    def login(self, email: str, api_token: str) -> JiraMyself:
        """Authenticate with e-mail and API token.

        Args:
            email: Atlassian account e-mail.
            api_token: Atlassian API token.

        Returns:
            The authenticated user.

        Raises:
            ValueError: If e-mail or token is blank.
            RemoteError: If Jira rejects the credentials.
        """
        if not email or not email.strip():
            raise ValueError("Jira e-mail address is required")
        if not api_token or not api_token.strip():
            raise ValueError("Jira API token is required")

        self.client.auth = httpx.BasicAuth(email.strip(), api_token.strip())
        try:
            body = send(self.client, "GET", "rest/api/3/myself", "open a Jira session")
            myself = _parse(JiraMyself, body)
        except (RemoteError, ParseError):
            self.logout()
            raise

        self.account_id = myself.account_id
        self.display_name = myself.display_name
        logger.info(f"Logged into Jira as {myself.display_name or myself.account_id}")
        return myself

    def logout(self) -> None:
        """Drop credentials and identity."""
        self.client.auth = None
        self.account_id = None
        self.display_name = None

    def _ensure_authenticated(self) -> None:
        if not self.is_authenticated:
            raise AuthenticationError("Log into Jira before retrieving worklogs")

    def search_issues_with_worklog_in_range(
        self,
        start_date: date,
        end_date: date,
        cancel: threading.Event | None = None,
    ) -> list[JiraIssue]:
        """Find issues the current user logged work on between two days.

        Args:
            start_date: First day (inclusive).
            end_date: Last day (inclusive).
            cancel: Optional cancellation signal.

        Returns:
            Matching issues, all pages concatenated.

        Raises:
            AuthenticationError: If not logged in.
            RemoteError: If the search fails.
        """
        self._ensure_authenticated()

        params: dict[str, Any] = {
            "jql": build_jql(start_date, end_date),
            "fields": "summary",
            "maxResults": self.SEARCH_PAGE_SIZE,
        }
        issues: list[JiraIssue] = []
        start_at = 0

        while True:
            params["startAt"] = start_at
            body = send(
                self.client,
                "GET",
                "rest/api/3/search",
                "search Jira worklogs",
                cancel=cancel,
                params=params,
            )
            page = _parse(JiraSearchResponse, body)
            issues.extend(page.issues)
            start_at += len(page.issues)

            if not page.issues or start_at >= page.total:
                break

        logger.debug(f"Jira search returned {len(issues)} issues")
        return issues

    def get_issue_worklogs(
        self,
        issue_key: str,
        cancel: threading.Event | None = None,
    ) -> list[JiraWorklog]:
        """Get every worklog of an issue, following pagination.

        Args:
            issue_key: Issue key, e.g. 'ABC-1'.
            cancel: Optional cancellation signal.

        Returns:
            Worklogs of the issue.

        Raises:
            AuthenticationError: If not logged in.
            RemoteError: If the request fails.
        """
        self._ensure_authenticated()

        worklogs: list[JiraWorklog] = []
        start_at = 0

        while True:
            body = send(
                self.client,
                "GET",
                f"rest/api/3/issue/{issue_key}/worklog",
                f"retrieve the worklogs of {issue_key}",
                cancel=cancel,
                params={"startAt": start_at, "maxResults": self.WORKLOG_PAGE_SIZE},
            )
            page = _parse(JiraWorklogResponse, body)
            worklogs.extend(page.worklogs)
            start_at += len(page.worklogs)

            if not page.worklogs or start_at >= page.total:
                break

        return worklogs

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()

    def __enter__(self) -> "JiraClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
