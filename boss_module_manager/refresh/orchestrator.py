# ==============================================
# RefreshOrchestrator
# ==============================================
#
# PURPOSE:
#   Run one refresh attempt: fetch → normalize → publish → persist.
#   Exposed both as a coroutine (run) and as a non-blocking
#   start() that schedules the coroutine on the running loop.
#
# STATE MACHINE:
#
#     IDLE ──start/run──▶ FETCHING ──ok──▶ APPLYING ──▶ IDLE
#                            │
#                            └──FeedError──▶ FAILED
#
#   FAILED is kept until the next attempt so get_status() can
#   report it. `loaded` is cleared on entering FETCHING and set
#   again when the attempt ends, whatever the outcome.
#
# SHARED STATE:
#   IgnoreState owns the current IgnoreSnapshot. The only write is
#   publish(), a single reference assignment, so a lookup running
#   between two awaits sees either the old or the new snapshot.
#
# OVERLAPPING ATTEMPTS:
#   Not deduplicated, not serialized. Two start() calls give two
#   independent attempts; whichever completes last is published.
#
# ==============================================

import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Set

from boss_module_manager.errors import FeedError
from boss_module_manager.feed.fetcher import FeedFetcher
from boss_module_manager.normalization.identifier_normalizer import (
    IdentifierNormalizer,
    IgnoreSnapshot,
    NameIdIndex,
)
from boss_module_manager.persistence.settings_store import (
    IgnoreTable,
    PersistedSettings,
    SettingsStore,
)

logger = logging.getLogger(__name__)


class RefreshState(Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    APPLYING = "applying"
    FAILED = "failed"


@dataclass
class RefreshResult:
    """Outcome of a single refresh attempt."""
    status: str
    modules: int = 0
    error: Optional[str] = None
    saved: bool = False
    elapsed_seconds: float = 0.0
    timestamp: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == "success"

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "modules": self.modules,
            "error": self.error,
            "saved": self.saved,
            "elapsed_seconds": self.elapsed_seconds,
            "timestamp": self.timestamp
        }


class IgnoreState:
    """Single owner of the published IgnoreSnapshot."""

    def __init__(self, ignore_table: Optional[IgnoreTable] = None):
        # Before the first refresh only the persisted table is known;
        # the name index stays empty until a feed has been read.
        self._snapshot = IgnoreSnapshot(
            ignore_table=dict(ignore_table or {}),
            index=NameIdIndex()
        )

    @property
    def snapshot(self) -> IgnoreSnapshot:
        return self._snapshot

    def publish(self, snapshot: IgnoreSnapshot) -> None:
        self._snapshot = snapshot


class RefreshOrchestrator:
    """
    Coordinates FeedFetcher, IdentifierNormalizer and SettingsStore.

    Attributes:
        state: current RefreshState
        loaded: readiness flag; True once any attempt has completed
        last_result: RefreshResult of the most recent completed attempt
    """

    def __init__(
        self,
        settings: PersistedSettings,
        ignore_state: IgnoreState,
        fetcher: FeedFetcher,
        normalizer: IdentifierNormalizer,
        store: SettingsStore
    ):
        self._settings = settings
        self._ignore_state = ignore_state
        self._fetcher = fetcher
        self._normalizer = normalizer
        self._store = store

        self.state = RefreshState.IDLE
        self.loaded = False
        self.last_result: Optional[RefreshResult] = None

        # Strong references so the loop doesn't drop running tasks
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> Set[asyncio.Task]:
        """Tasks started with start() that have not finished yet."""
        return set(self._tasks)

    def start(self) -> asyncio.Task:
        """
        Schedule a refresh attempt on the running event loop.

        Returns immediately. Must be called from inside a running loop.

        Returns:
            The task running the attempt.
        """
        loop = asyncio.get_running_loop()
        self.begin()
        task = loop.create_task(self.run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def begin(self) -> None:
        """
        Enter FETCHING and clear `loaded`.

        Called synchronously by whoever schedules an attempt, so that
        `loaded` is already False when the scheduling call returns.
        """
        self.loaded = False
        self.state = RefreshState.FETCHING

    async def run(self) -> RefreshResult:
        """
        Perform one refresh attempt and return its outcome.

        Never raises: every failure ends the attempt with `loaded`
        set and the previously published data left in place.
        """
        start_time = time.time()
        url = self._settings.site_url

        self.begin()
        logger.info(f"Refreshing boss module list from {url}")

        try:
            descriptors = await asyncio.to_thread(self._fetcher.fetch, url)
        except FeedError as e:
            return self._finish_failed(str(e), start_time)
        except Exception as e:
            logger.exception(f"✗ Unexpected error fetching {url}")
            return self._finish_failed(f"unexpected error: {e}", start_time)

        self.state = RefreshState.APPLYING
        try:
            snapshot = self._normalizer.normalize(descriptors)
        except Exception as e:
            logger.exception("✗ Failed to build ignore lists from feed")
            return self._finish_failed(f"unexpected error: {e}", start_time)

        self._ignore_state.publish(snapshot)
        self._settings.ignore_table = snapshot.ignore_table
        saved = self._store.save(self._settings)

        self.state = RefreshState.IDLE
        self.loaded = True

        elapsed = time.time() - start_time
        result = RefreshResult(
            status="success",
            modules=len(snapshot.ignore_table),
            saved=saved,
            elapsed_seconds=round(elapsed, 3),
            timestamp=_now()
        )
        self.last_result = result
        logger.info(f"✓ List successfully loaded: {result.modules} modules in {elapsed:.2f}s")
        return result

    def _finish_failed(self, error: str, start_time: float) -> RefreshResult:
        self.state = RefreshState.FAILED
        self.loaded = True

        result = RefreshResult(
            status="failed",
            error=error,
            elapsed_seconds=round(time.time() - start_time, 3),
            timestamp=_now()
        )
        self.last_result = result
        logger.warning(f"✗ Refresh failed, keeping previous ignore lists: {error}")
        return result


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
