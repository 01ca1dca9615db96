# ==============================================
# TOPIC 1: PERSISTENCE (Cache across restarts)
# ==============================================
#
# This package saves and loads the ignore table so that
# lookups work before the first refresh of a new process.
#
# Modules:
# --------
# - settings_store.py  → Load/save BossModules.json, schema migration
#
# ==============================================

from .settings_store import (
    CURRENT_SCHEMA_VERSION,
    IgnoreTable,
    PersistedSettings,
    SettingsStore,
)

__all__ = ["CURRENT_SCHEMA_VERSION", "IgnoreTable", "PersistedSettings", "SettingsStore"]
