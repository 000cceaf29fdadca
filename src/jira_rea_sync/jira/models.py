"""Pydantic models for Jira API responses."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class JiraMyself(BaseModel):
    """Authenticated Jira user."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(alias="accountId")
    display_name: str = Field(default="", alias="displayName")


class JiraIssueFields(BaseModel):
    """Subset of issue fields requested by the worklog search."""

    summary: str | None = None


class JiraIssue(BaseModel):
    """Jira issue model."""

    id: str = ""
    key: str
    fields: JiraIssueFields = Field(default_factory=JiraIssueFields)

    @property
    def summary(self) -> str:
        """Issue title, empty when Jira did not return one."""
        return self.fields.summary or ""


class JiraSearchResponse(BaseModel):
    """One page of an issue search."""

    model_config = ConfigDict(populate_by_name=True)

    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    total: int = 0
    issues: list[JiraIssue] = Field(default_factory=list)


class JiraWorklogAuthor(BaseModel):
    """Author of a worklog."""

    model_config = ConfigDict(populate_by_name=True)

    account_id: str = Field(default="", alias="accountId")
    display_name: str = Field(default="", alias="displayName")


class JiraCommentNode(BaseModel):
    """Node of an Atlassian document (rich-text) tree."""

    type: str | None = None
    text: str | None = None
    content: list["JiraCommentNode"] = Field(default_factory=list)


class JiraWorklog(BaseModel):
    """Jira worklog model."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = ""
    author: JiraWorklogAuthor = Field(default_factory=JiraWorklogAuthor)
    started: str = ""
    time_spent_seconds: int = Field(default=0, alias="timeSpentSeconds")
    # API v3 returns a document tree, API v2 a plain string.
    comment: JiraCommentNode | str | None = None


class JiraWorklogResponse(BaseModel):
    """One page of an issue's worklogs."""

    model_config = ConfigDict(populate_by_name=True)

    start_at: int = Field(default=0, alias="startAt")
    max_results: int = Field(default=0, alias="maxResults")
    total: int = 0
    worklogs: list[JiraWorklog] = Field(default_factory=list)


class WorklogCandidate(BaseModel):
    """A worklog proposed for import into the Rea portal."""

    model_config = ConfigDict(frozen=True)

    issue_key: str
    issue_summary: str = ""
    task: str
    start: datetime
    end: datetime
    effort_hours: float
    comment: str = ""
    jira_worklog_id: str | None = None
