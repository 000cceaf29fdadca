"""Tests for the Jira client."""

from datetime import date

import httpx
import pytest

from jira_rea_sync.errors import AuthenticationError, ParseError, RemoteError
from jira_rea_sync.jira import JiraClient
from jira_rea_sync.jira.client import build_jql

BASE_URL = "https://example.atlassian.net/"


def myself(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"accountId": "acc-1", "displayName": "Ada"})


class TestJiraClient:
    """Test JiraClient functionality."""

    def test_build_jql(self) -> None:
        """Test the worklog search query."""
        assert build_jql(date(2024, 5, 1), date(2024, 5, 31)) == (
            'worklogAuthor = currentUser() AND worklogDate >= "2024/05/01" '
            'AND worklogDate <= "2024/05/31"'
        )

    def test_login(self) -> None:
        """Test login with basic authentication."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return myself(request)

        client = JiraClient(BASE_URL, transport=httpx.MockTransport(handler))
        user = client.login(" ada@example.com ", "secret")

        assert user.account_id == "acc-1"
        assert client.is_authenticated
        assert client.account_id == "acc-1"
        assert seen[0].headers["Authorization"].startswith("Basic ")

    def test_login_rejected(self) -> None:
        """Test rejected credentials leave the client logged out."""
        client = JiraClient(
            BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(401, text="Unauthorized")),
        )

        with pytest.raises(RemoteError) as exc_info:
            client.login("ada@example.com", "wrong")

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Unauthorized"
        assert not client.is_authenticated
        assert client.client.auth is None

    def test_login_unexpected_response(self) -> None:
        """Test a profile response without an account id."""
        client = JiraClient(
            BASE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"name": "x"})),
        )

        with pytest.raises(ParseError):
            client.login("ada@example.com", "token")

        assert not client.is_authenticated

    @pytest.mark.parametrize("email, token", [("", "token"), ("ada@example.com", "  ")])
    def test_login_requires_credentials(self, email: str, token: str) -> None:
        """Test blank credentials."""
        with pytest.raises(ValueError):
            JiraClient(BASE_URL).login(email, token)

    def test_search_requires_login(self) -> None:
        """Test searching without a session."""
        with pytest.raises(AuthenticationError):
            JiraClient(BASE_URL).search_issues_with_worklog_in_range(date(2024, 5, 1), date(2024, 5, 1))

    def test_search_follows_pages(self) -> None:
        """Test that every search page is requested."""
        starts: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/myself"):
                return myself(request)
            start = int(request.url.params["startAt"])
            starts.append(request.url.params["startAt"])
            assert request.url.params["fields"] == "summary"
            assert "worklogAuthor = currentUser()" in request.url.params["jql"]
            issues = [{"key": f"ABC-{start + i}", "fields": {"summary": "s"}} for i in range(2)]
            return httpx.Response(200, json={"startAt": start, "total": 4, "issues": issues})

        client = JiraClient(BASE_URL, transport=httpx.MockTransport(handler))
        client.login("ada@example.com", "token")

        issues = client.search_issues_with_worklog_in_range(date(2024, 5, 1), date(2024, 5, 2))

        assert [issue.key for issue in issues] == ["ABC-0", "ABC-1", "ABC-2", "ABC-3"]
        assert starts == ["0", "2"]

    def test_worklogs_follow_pages(self) -> None:
        """Test that every worklog page is requested."""

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/myself"):
                return myself(request)
            assert request.url.path == "/rest/api/3/issue/ABC-1/worklog"
            assert request.url.params["maxResults"] == "1000"
            start = int(request.url.params["startAt"])
            worklogs = [{"id": str(start), "started": "2024-05-01T09:00:00.000+0000"}]
            return httpx.Response(200, json={"startAt": start, "total": 2, "worklogs": worklogs})

        client = JiraClient(BASE_URL, transport=httpx.MockTransport(handler))
        client.login("ada@example.com", "token")

        worklogs = client.get_issue_worklogs("ABC-1")

        assert [w.id for w in worklogs] == ["0", "1"]

    def test_timeout_reported_without_status(self) -> None:
        """Test that a timeout becomes a RemoteError without status code."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        client = JiraClient(BASE_URL, transport=httpx.MockTransport(handler))

        with pytest.raises(RemoteError) as exc_info:
            client.login("ada@example.com", "token")

        assert exc_info.value.status_code is None
        assert "timed out" in str(exc_info.value)

    def test_logout(self) -> None:
        """Test that logout drops the identity."""
        client = JiraClient(BASE_URL, transport=httpx.MockTransport(myself))
        client.login("ada@example.com", "token")

        client.logout()

        assert not client.is_authenticated
        assert client.display_name is None
