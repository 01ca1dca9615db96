# ==============================================
# BossModuleManager — Capability Surface
# ==============================================
#
# PURPOSE:
#   The one class the host talks to. Wires the five topics
#   together and exposes a small, read-only set of operations.
#
#   startup:
#     TOPIC 1  SettingsStore.load()  → PersistedSettings
#                                    → IgnoreState (persisted table,
#                                      empty name index)
#
#   refresh():
#     TOPIC 4  RefreshOrchestrator
#       ├── TOPIC 2  FeedFetcher.fetch()          (off the loop)
#       ├── TOPIC 3  IdentifierNormalizer.normalize()
#       ├── IgnoreState.publish(snapshot)         (one assignment)
#       └── TOPIC 1  SettingsStore.save()
#
#   get_ignored_modules() / get_ignored_module_ids():
#     TOPIC 5  IgnoreLookup → IgnoreState.snapshot
#
#   Public Methods (host-facing API):
#   ---------------------------------
#   - get_ignored_modules(name) -> list[str] | None   (display names)
#   - get_ignored_module_ids(name) -> list[str] | None
#   - refresh() -> None                                (fire-and-forget)
#   - loaded() -> bool
#   - get_status() -> dict
#   - wait_until_loaded() (async)
#   - join(timeout) -> bool                            (threaded refreshes)
#
#   There are no mutating methods: the host can read the ignore
#   lists and trigger refreshes, nothing else.
#
#   Starting the first refresh is up to the host, e.g.
#       manager = BossModuleManager.start()
#
# ==============================================

import asyncio
import logging
import threading
import time
from typing import List, Optional

from boss_module_manager.config import AppConfig, get_config
from boss_module_manager.feed.fetcher import FeedFetcher
from boss_module_manager.lookup.ignore_lookup import IgnoreLookup
from boss_module_manager.normalization.identifier_normalizer import IdentifierNormalizer
from boss_module_manager.persistence.settings_store import SettingsStore
from boss_module_manager.refresh.orchestrator import IgnoreState, RefreshOrchestrator

logger = logging.getLogger(__name__)


class BossModuleManager:
    """Keeps track of which boss modules should ignore each other."""

    def __init__(self, config: Optional[AppConfig] = None, fetcher: Optional[FeedFetcher] = None):
        """
        Load the persisted settings and wire up all components.

        Args:
            config: Application configuration. If None, loads from environment.
            fetcher: FeedFetcher to use instead of one built from config.
        """
        self._config = config or get_config()

        # TOPIC 1: Persistence
        self._store = SettingsStore(
            self._config.settings_path,
            default_site_url=self._config.default_site_url
        )
        self._settings = self._store.load()

        self._ignore_state = IgnoreState(self._settings.ignore_table)

        # TOPIC 2 + 3: Feed and normalization
        self._fetcher = fetcher or FeedFetcher(
            modules_key=self._config.feed.modules_key,
            timeout=self._config.feed.timeout_seconds
        )
        self._normalizer = IdentifierNormalizer()

        # TOPIC 4: Refresh
        self._orchestrator = RefreshOrchestrator(
            settings=self._settings,
            ignore_state=self._ignore_state,
            fetcher=self._fetcher,
            normalizer=self._normalizer,
            store=self._store
        )

        # TOPIC 5: Lookup
        self._lookup = IgnoreLookup(self._ignore_state)

        # Refresh threads started when no event loop was running
        self._threads: List[threading.Thread] = []

        logger.info("Service is active")

    @classmethod
    def start(cls, config: Optional[AppConfig] = None) -> 'BossModuleManager':
        """Construct the manager and kick off the first refresh."""
        manager = cls(config)
        manager.refresh()
        return manager

    def get_ignored_modules(self, name: str) -> Optional[List[str]]:
        """Ignore list of a module as display names, or None if unknown."""
        return self._lookup.resolve_ignore_list(name, want_ids=False)

    def get_ignored_module_ids(self, name: str) -> Optional[List[str]]:
        """Ignore list of a module as module IDs, or None if unknown."""
        return self._lookup.resolve_ignore_list(name, want_ids=True)

    def refresh(self) -> None:
        """
        Start a refresh attempt without waiting for it.

        Inside a running event loop the attempt becomes a task on that
        loop. Without one it runs on a daemon thread with its own loop.
        Either way loaded() is False by the time this returns.
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            self._orchestrator.begin()
            thread = threading.Thread(
                target=asyncio.run,
                args=(self._orchestrator.run(),),
                name="boss-module-refresh",
                daemon=True
            )
            self._threads = [t for t in self._threads if t.is_alive()]
            self._threads.append(thread)
            thread.start()
            return

        self._orchestrator.start()

    def loaded(self) -> bool:
        """True once a refresh attempt has completed and none is in flight."""
        return self._orchestrator.loaded

    async def wait_until_loaded(self) -> None:
        """
        Await every refresh task started on the current loop.

        Attempts started without a running loop run on threads; use
        join() for those.
        """
        while True:
            pending = self._orchestrator.pending
            if not pending:
                return
            await asyncio.gather(*pending)

    def join(self, timeout: Optional[float] = None) -> bool:
        """
        Block until refresh threads started by refresh() have finished.

        Args:
            timeout: Seconds to wait in total, or None to wait indefinitely

        Returns:
            True if every thread finished within the timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        for thread in list(self._threads):
            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            thread.join(remaining)
        self._threads = [t for t in self._threads if t.is_alive()]
        return not self._threads

    def get_status(self) -> dict:
        """
        Get current manager status.

        Returns:
            Dictionary with refresh and cache state information.
        """
        snapshot = self._ignore_state.snapshot
        last_result = self._orchestrator.last_result
        return {
            "loaded": self._orchestrator.loaded,
            "refresh_state": self._orchestrator.state.value,
            "site_url": self._settings.site_url,
            "settings_file": str(self._store.settings_file),
            "schema_version": self._settings.version,
            "modules_with_ignore_lists": len(snapshot.ignore_table),
            "known_module_names": len(snapshot.index),
            "last_refresh": last_result.to_dict() if last_result else None
        }

    def close(self) -> None:
        """Release the HTTP session."""
        self._fetcher.close()
