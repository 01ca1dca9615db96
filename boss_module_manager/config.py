# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Load configuration from environment variables / .env file.
#   Provides typed config objects to all other modules.
#
# CLASSES:
# --------
# - FeedConfig (dataclass)
#     modules_key: str          (default "KtaneModules")
#     timeout_seconds: float    (default 30.0)
#
# - LoggingConfig (dataclass)
#     level: str                (default "INFO")
#     file: str                 (default "" → console only)
#
# - AppConfig (dataclass)
#     feed: FeedConfig
#     logging: LoggingConfig
#     default_site_url: str     (seeds fresh settings only)
#     data_dir: str             (default "~/.boss_module_manager")
#     settings_file: str        (default "<data_dir>/Modsettings/BossModules.json")
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same singleton on repeated calls.
#
# NOTE:
#   The SiteUrl stored in the persisted settings file wins over
#   default_site_url. The env value only matters the first time
#   the cache file is created (or after it was discarded).
#
# USAGE:
# ------
#   from boss_module_manager.config import get_config
#   config = get_config()
#   print(config.settings_path)
#
# ==============================================

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


DEFAULT_SITE_URL = "https://ktane.timwi.de/json/raw"
DEFAULT_MODULES_KEY = "KtaneModules"
DEFAULT_DATA_DIR = "~/.boss_module_manager"
SETTINGS_SUBDIR = "Modsettings"
SETTINGS_FILENAME = "BossModules.json"


@dataclass
class FeedConfig:
    """Remote feed configuration."""
    modules_key: str = DEFAULT_MODULES_KEY
    timeout_seconds: float = 30.0


@dataclass
class LoggingConfig:
    """Logging configuration used by the CLI."""
    level: str = "INFO"
    file: str = ""


@dataclass
class AppConfig:
    """Main application configuration."""
    feed: FeedConfig = field(default_factory=FeedConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    default_site_url: str = DEFAULT_SITE_URL
    data_dir: str = DEFAULT_DATA_DIR
    settings_file: str = ""

    @property
    def settings_path(self) -> Path:
        """Resolved location of the persisted cache file."""
        if self.settings_file:
            return Path(self.settings_file).expanduser()
        return Path(self.data_dir).expanduser() / SETTINGS_SUBDIR / SETTINGS_FILENAME


# Singleton instance
_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same singleton instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    # Load .env file from project root
    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    feed_config = FeedConfig(
        modules_key=os.getenv("BOSS_FEED_KEY", DEFAULT_MODULES_KEY),
        timeout_seconds=float(os.getenv("BOSS_HTTP_TIMEOUT", "30.0"))
    )

    logging_config = LoggingConfig(
        level=os.getenv("BOSS_LOG_LEVEL", "INFO"),
        file=os.getenv("BOSS_LOG_FILE", "")
    )

    _config_instance = AppConfig(
        feed=feed_config,
        logging=logging_config,
        default_site_url=os.getenv("BOSS_SITE_URL", DEFAULT_SITE_URL),
        data_dir=os.getenv("BOSS_DATA_DIR", DEFAULT_DATA_DIR),
        settings_file=os.getenv("BOSS_SETTINGS_FILE", "")
    )

    return _config_instance
