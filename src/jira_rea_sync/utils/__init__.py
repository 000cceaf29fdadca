"""Utility modules for Jira to Rea synchronization."""

from jira_rea_sync.utils.logging import get_logger, setup_logging
from jira_rea_sync.utils.storage import StorageManager

__all__ = ["get_logger", "setup_logging", "StorageManager"]
