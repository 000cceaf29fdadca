"""Jira API integration."""

from jira_rea_sync.jira.client import JiraClient
from jira_rea_sync.jira.fetcher import WorklogFetcher
from jira_rea_sync.jira.models import (
    JiraIssue,
    JiraWorklog,
    WorklogCandidate,
)

__all__ = [
    "JiraClient",
    "JiraIssue",
    "JiraWorklog",
    "WorklogCandidate",
    "WorklogFetcher",
]
