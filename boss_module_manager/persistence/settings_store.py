import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from boss_module_manager.config import DEFAULT_SITE_URL
from boss_module_manager.errors import ConfigLoadError, ConfigSaveError

logger = logging.getLogger(__name__)


# ==============================================
# Schema versions
# ==============================================
#
#   Version 1 (legacy, often unstamped):
#     {"SiteUrl": ..., "IgnoredModules": {display name: [display names]}}
#
#   Version 2 (current):
#     {"SiteUrl": ..., "IgnoredModuleIds": {module id: [module ids]}, "Version": 2}
#
#   A file below the current version keeps its SiteUrl but its
#   table is thrown away; the next refresh rebuilds it by ID.
#
CURRENT_SCHEMA_VERSION = 2
LEGACY_SCHEMA_VERSION = 1

IgnoreTable = Dict[str, List[str]]


# ==============================================
# PersistedSettings
# ==============================================
#
# PURPOSE:
#   The whole on-disk state: where to fetch from, the last good
#   ignore table, and the schema version stamp.
#
class PersistedSettings:
    """Settings object persisted as BossModules.json"""
    def __init__(
        self,
        site_url: str = DEFAULT_SITE_URL,
        ignore_table: Optional[IgnoreTable] = None,
        version: int = CURRENT_SCHEMA_VERSION
    ):
        self.site_url = site_url
        self.ignore_table: IgnoreTable = ignore_table if ignore_table is not None else {}
        self.version = version

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "SiteUrl": self.site_url,
            "IgnoredModuleIds": {
                module_id: list(ignored)
                for module_id, ignored in self.ignore_table.items()
            },
            "Version": self.version
        }

    @staticmethod
    def from_dict(data: Any, default_site_url: str = DEFAULT_SITE_URL) -> 'PersistedSettings':
        """
        Create from dictionary (deserialization).

        Applies the schema migration: an outdated version or a missing/null
        table yields an empty table stamped with the current version.

        Raises:
            ConfigLoadError: if the data does not have the expected shape.
        """
        if not isinstance(data, dict):
            raise ConfigLoadError(f"expected a JSON object, got {type(data).__name__}")

        site_url = data.get("SiteUrl", default_site_url)
        if not isinstance(site_url, str):
            raise ConfigLoadError("SiteUrl must be a string")

        version = data.get("Version", LEGACY_SCHEMA_VERSION)
        # bool is an int subclass
        if not isinstance(version, int) or isinstance(version, bool):
            raise ConfigLoadError("Version must be an integer")

        raw_table = data.get("IgnoredModuleIds")

        if version < CURRENT_SCHEMA_VERSION:
            logger.info(
                f"Settings file uses schema version {version}; "
                f"discarding ignore table and upgrading to version {CURRENT_SCHEMA_VERSION}"
            )
            return PersistedSettings(site_url=site_url, version=CURRENT_SCHEMA_VERSION)

        if raw_table is None:
            logger.info("Settings file has a null list of ignored modules")
            return PersistedSettings(site_url=site_url, version=version)

        return PersistedSettings(
            site_url=site_url,
            ignore_table=_parse_ignore_table(raw_table),
            version=version
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PersistedSettings):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"PersistedSettings(site_url={self.site_url!r}, "
            f"modules={len(self.ignore_table)}, version={self.version})"
        )


def _parse_ignore_table(raw_table: Any) -> IgnoreTable:
    if not isinstance(raw_table, dict):
        raise ConfigLoadError("IgnoredModuleIds must be a JSON object")

    table: IgnoreTable = {}
    for module_id, ignored in raw_table.items():
        if not isinstance(ignored, list) or not all(isinstance(entry, str) for entry in ignored):
            raise ConfigLoadError(f"ignore list for '{module_id}' must be a list of strings")
        table[module_id] = list(ignored)
    return table


# CLASS: SettingsStore
# --------------------
#   Stateful — holds a reference to the settings file.
#
#   Methods:
#   --------
#   - load() -> PersistedSettings
#       Never raises. Missing file → defaults. Corrupt file → defaults.
#
#   - save(settings) -> bool
#       Never raises. Returns False when the write failed.
#
#   - exists() / clear()
#       Is there a cache file? Delete it (CLI reset).
#
class SettingsStore:
    """
    Reads and writes the persisted settings file.

    The file lives at <data_dir>/Modsettings/BossModules.json unless
    configured otherwise. Its absence is not an error.
    """

    def __init__(self, settings_file: Path, default_site_url: str = DEFAULT_SITE_URL):
        """
        Args:
            settings_file: Path of the JSON cache file
            default_site_url: Site URL used when fresh settings are created
        """
        self.settings_file = Path(settings_file)
        self.default_site_url = default_site_url

    def defaults(self) -> PersistedSettings:
        """Fresh settings: default URL, empty table, current version."""
        return PersistedSettings(site_url=self.default_site_url)

    def load(self) -> PersistedSettings:
        """
        Load settings from disk.

        Returns:
            The persisted settings, migrated to the current schema,
            or fresh defaults if the file is absent or unusable.
        """
        if not self.settings_file.exists():
            logger.info(f"No settings file found at {self.settings_file}; using defaults")
            return self.defaults()

        try:
            settings = self._read()
        except ConfigLoadError as e:
            logger.error(f"✗ Error loading settings file {self.settings_file}: {e}")
            return self.defaults()

        logger.info(
            f"✓ Settings successfully loaded from {self.settings_file} "
            f"({len(settings.ignore_table)} modules)"
        )
        return settings

    def _read(self) -> PersistedSettings:
        try:
            with open(self.settings_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ConfigLoadError(str(e)) from e

        return PersistedSettings.from_dict(data, default_site_url=self.default_site_url)

    def save(self, settings: PersistedSettings) -> bool:
        """
        Save settings to disk, creating the parent directory if needed.

        Returns:
            True on success, False if the write failed. The in-memory
            settings stay authoritative either way.
        """
        try:
            self._write(settings)
        except ConfigSaveError as e:
            logger.error(f"✗ Failed to save settings file {self.settings_file}: {e}")
            return False

        logger.debug(f"Saved {len(settings.ignore_table)} modules to {self.settings_file}")
        return True

    def _write(self, settings: PersistedSettings) -> None:
        try:
            self.settings_file.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(settings.to_dict(), indent=2, ensure_ascii=False)
            with open(self.settings_file, 'w', encoding='utf-8') as f:
                f.write(payload)
        except (OSError, TypeError, ValueError) as e:
            raise ConfigSaveError(str(e)) from e

    def exists(self) -> bool:
        """Check whether a settings file is present."""
        return self.settings_file.exists()

    def clear(self) -> None:
        """Delete the settings file (reset)."""
        if self.settings_file.exists():
            self.settings_file.unlink()
            logger.info(f"Deleted {self.settings_file}")
