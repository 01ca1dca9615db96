# ==============================================
# Pytest Configuration and Fixtures
# ==============================================
#
# Shared fixtures for all tests.
#
# - sample_feed        → descriptor array with names, IDs and ignore lists
# - settings_file      → path to a not-yet-existing cache file under tmp_path
# - app_config         → AppConfig pointing at settings_file
# - stub_fetcher       → factory for a fetcher that returns/raises on demand
#
# No test touches the network: FeedFetcher tests patch the
# requests session, everything above it uses StubFetcher.
# ==============================================

import json

import pytest

from boss_module_manager.config import AppConfig


class StubFetcher:
    """Stands in for FeedFetcher. Returns `payload` or raises `error`."""

    def __init__(self, payload=None, error=None):
        self.payload = payload if payload is not None else []
        self.error = error
        self.calls = []
        self.closed = False

    def fetch(self, url):
        self.calls.append(url)
        if self.error is not None:
            raise self.error
        return self.payload

    def close(self):
        self.closed = True


@pytest.fixture
def sample_feed() -> list:
    """Feed entries mixing display names and IDs in ignore lists."""
    return [
        {"Name": "Module A", "ModuleID": "modA", "Ignore": ["Module B"]},
        {"Name": "Module B", "ModuleID": "modB", "Ignore": []},
        {"Name": "Forget Me Not", "ModuleID": "MemoryV2", "Ignore": ["Module A", "modB", "Souvenir"]},
        {"Name": "Simon’s Stages", "ModuleID": "simonsStages", "Ignore": ["Forget Me Not"]},
        {"Name": "Souvenir", "ModuleID": "SouvenirModule"},
    ]


@pytest.fixture
def settings_file(tmp_path):
    return tmp_path / "Modsettings" / "BossModules.json"


@pytest.fixture
def app_config(settings_file) -> AppConfig:
    return AppConfig(settings_file=str(settings_file))


@pytest.fixture
def write_settings(settings_file):
    """Write raw JSON (or raw text) to the settings file."""
    def _write(content):
        settings_file.parent.mkdir(parents=True, exist_ok=True)
        text = content if isinstance(content, str) else json.dumps(content)
        settings_file.write_text(text, encoding="utf-8")
        return settings_file
    return _write


@pytest.fixture
def stub_fetcher():
    return StubFetcher
