"""Reconciliation of Jira worklogs with the Rea portal."""

from jira_rea_sync.sync.cache import DateRangeKey, EntryCache
from jira_rea_sync.sync.engine import ImportResult, ReconciliationEngine
from jira_rea_sync.sync.session import SyncSession

__all__ = [
    "DateRangeKey",
    "EntryCache",
    "ImportResult",
    "ReconciliationEngine",
    "SyncSession",
]
