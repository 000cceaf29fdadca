"""Rea time-sheet portal integration."""

from jira_rea_sync.rea.client import ReaClient
from jira_rea_sync.rea.models import ReaProject, ReaTimeEntry, ReaUserProfile
from jira_rea_sync.rea.normalizer import (
    extract_projects,
    extract_time_entries,
    extract_token,
    extract_user_profile,
)

__all__ = [
    "ReaClient",
    "ReaProject",
    "ReaTimeEntry",
    "ReaUserProfile",
    "extract_projects",
    "extract_time_entries",
    "extract_token",
    "extract_user_profile",
]
