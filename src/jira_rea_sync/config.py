"""Configuration management for Jira to Rea synchronization."""

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from jira_rea_sync.utils.storage import StorageManager

DEFAULT_TIMEOUT = 30.0


class Config:
    """Remembered, non-secret settings: service URLs, user names and the chosen project.

    Settings are grouped in sections, e.g. `{"jira": {"base_url": ..., "email": ...}}`.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            config_dir: Directory for storing configuration.
        """
        self.storage = StorageManager(config_dir)
        self._settings = self.storage.load_settings()

    def get_settings(self) -> dict[str, Any]:
        """Get all settings.

        Returns:
            Settings dictionary.
        """
        return self._settings

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a single setting.

        Args:
            section: Section name, e.g. 'jira'.
            key: Setting name within the section.
            default: Returned when the setting is missing or empty.

        Returns:
            Setting value or default.
        """
        value = self._settings.get(section, {}).get(key)
        return default if value in (None, "") else value

    def remember(self, section: str, key: str, value: Any) -> None:
        """Update a setting and save it.

        Args:
            section: Section name.
            key: Setting name within the section.
            value: New value. None removes the setting.
        """
        values = self._settings.setdefault(section, {})
        if value is None:
            values.pop(key, None)
        else:
            values[key] = value
        self.storage.save_settings(self._settings)

    @property
    def jira_url(self) -> str | None:
        """Jira site URL."""
        return self.get("jira", "base_url")

    @property
    def jira_email(self) -> str | None:
        """Remembered Jira e-mail."""
        return self.get("jira", "email")

    @property
    def rea_url(self) -> str | None:
        """Rea portal API URL, None for the client default."""
        return self.get("rea", "base_url")

    @property
    def rea_username(self) -> str | None:
        """Remembered Rea portal user name."""
        return self.get("rea", "username")

    @property
    def rea_project_id(self) -> str | None:
        """Last Rea project imported into."""
        value = self.get("rea", "project_id")
        return str(value) if value is not None else None

    @property
    def timeout(self) -> float:
        """Per-request timeout in seconds."""
        return float(self.get("http", "timeout", DEFAULT_TIMEOUT))

    @property
    def timezone(self) -> ZoneInfo | None:
        """Zone deciding which day a worklog belongs to; None for the local zone.

        Raises:
            ValueError: If the configured zone name is unknown.
        """
        name = self.get("jira", "timezone")
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown time zone in settings: {name}") from e
