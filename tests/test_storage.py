"""Tests for storage management."""

from pathlib import Path

from jira_rea_sync.utils import StorageManager


class TestStorageManager:
    """Test StorageManager functionality."""

    def test_init_creates_directory(self, temp_config_dir: Path) -> None:
        """Test that initialization creates the config directory."""
        config_dir = temp_config_dir / "nested" / "config"

        storage = StorageManager(config_dir)

        assert config_dir.is_dir()
        assert storage.settings_file == config_dir / "settings.yaml"
        assert storage.audit_file == config_dir / "import.log"

    def test_load_missing_settings(self, storage_manager: StorageManager) -> None:
        """Test loading before anything was saved."""
        assert storage_manager.load_settings() == {}

    def test_save_and_load_settings(self, storage_manager: StorageManager) -> None:
        """Test saving and loading settings."""
        settings = {"jira": {"base_url": "https://example.atlassian.net/"}, "rea": {"project_id": "P1"}}

        storage_manager.save_settings(settings)

        assert storage_manager.settings_file.exists()
        assert storage_manager.load_settings() == settings

    def test_empty_settings_file(self, storage_manager: StorageManager) -> None:
        """Test an empty settings file."""
        storage_manager.settings_file.write_text("", encoding="utf-8")

        assert storage_manager.load_settings() == {}
