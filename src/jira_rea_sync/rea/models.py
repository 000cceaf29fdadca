"""Pydantic models for Rea portal API payloads.

The portal's JSON is not consistent across deployments: property names vary in case, ids
arrive as numbers or strings and dates with or without a time of day. The models here
accept all of these.
"""

import json
from datetime import date, datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DataT = TypeVar("DataT")


def flexible_string(value: Any) -> Any:
    """Coerce JSON scalars and containers into strings; None stays None."""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return value


class CaseInsensitiveModel(BaseModel):
    """Base model matching input property names regardless of case."""

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _match_property_names(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        names: dict[str, str] = {}
        for name, field in cls.model_fields.items():
            target = field.alias or name
            names.setdefault(name.lower(), target)
            names.setdefault(target.lower(), target)

        matched: dict[str, Any] = {}
        for key, value in data.items():
            target = names.get(key.lower()) if isinstance(key, str) else None
            if target is None:
                continue
            # First occurrence wins when a payload repeats a name in another case.
            matched.setdefault(target, value)
        return matched


class ReaApiResponse(CaseInsensitiveModel, Generic[DataT]):
    """Standard `{data, message, ...}` envelope of the portal."""

    data: DataT | None = None


class ReaTimeEntry(CaseInsensitiveModel):
    """Rea portal time entry.

    An id of 0 means the entry has not been persisted by the portal yet.
    """

    id: int | str = 0
    user_id: str = Field(default="", alias="userId")
    project_id: str = Field(default="", alias="projectId")
    task: str = ""
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    effort: float = 0.0
    comment: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _default_id(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("user_id", "project_id", "task", "comment", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        return flexible_string(value)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _truncate_to_day(cls, value: Any) -> Any:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, str):
            text = value.strip()
            try:
                return date.fromisoformat(text[:10])
            except ValueError:
                return value
        return value

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to API-compatible dictionary.

        Returns:
            Dictionary for API submission.
        """
        return {
            "id": self.id,
            "userId": self.user_id,
            "projectId": self.project_id,
            "task": self.task,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "effort": self.effort,
            "comment": self.comment,
        }


class ReaProjectPayload(CaseInsensitiveModel):
    """Project item as found in the documented project list envelope."""

    project_id: str | None = Field(default=None, alias="projectId")
    id: str | None = None
    project_name: str | None = Field(default=None, alias="projectName")
    name: str | None = None
    title: str | None = None
    project_code: str | None = Field(default=None, alias="projectCode")
    code: str | None = None
    short_name: str | None = Field(default=None, alias="shortName")
    key: str | None = None
    project_key: str | None = Field(default=None, alias="projectKey")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return flexible_string(value)


class ReaProject(BaseModel):
    """Rea portal project."""

    id: str
    name: str
    code: str | None = None

    @property
    def display_name(self) -> str:
        """Name shown to users, prefixed with the project code when there is one."""
        if self.code:
            return f"{self.code} - {self.name}"
        return self.name


class ReaUserProfile(BaseModel):
    """Profile of the logged in portal user."""

    user_id: str
    name: str | None = None
