"""Storage of remembered settings for Jira to Rea synchronization."""

from pathlib import Path
from typing import Any

import yaml

DEFAULT_CONFIG_DIR = Path.home() / ".jira-rea-sync"


class StorageManager:
    """Manages the configuration directory and its settings file.

    Secrets (Jira API token, portal password) are never written here.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        """Initialize storage manager.

        Args:
            config_dir: Directory to store configuration. Defaults to ~/.jira-rea-sync/
        """
        self.config_dir = config_dir or DEFAULT_CONFIG_DIR
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self.settings_file = self.config_dir / "settings.yaml"
        self.audit_file = self.config_dir / "import.log"

    def load_settings(self) -> dict[str, Any]:
        """Load remembered settings.

        Returns:
            Settings dictionary, empty if nothing was saved yet.
        """
        if self.settings_file.exists():
            with open(self.settings_file, encoding="utf-8") as f:
                return yaml.safe_load(f) or {}
        return {}

    def save_settings(self, settings: dict[str, Any]) -> None:
        """Save settings.

        Args:
            settings: Settings dictionary to save.
        """
        with open(self.settings_file, "w", encoding="utf-8") as f:
            yaml.safe_dump(settings, f, default_flow_style=False, sort_keys=False)
