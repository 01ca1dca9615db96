# ==============================================
# Tests for RefreshOrchestrator / IgnoreState
# ==============================================

import asyncio
import threading

import pytest

from boss_module_manager.errors import FeedShapeError, FeedStatusError, FeedTransportError
from boss_module_manager.normalization.identifier_normalizer import IdentifierNormalizer
from boss_module_manager.persistence.settings_store import PersistedSettings, SettingsStore
from boss_module_manager.refresh.orchestrator import (
    IgnoreState,
    RefreshOrchestrator,
    RefreshState,
)

SITE_URL = "http://feed.test/raw"
PREVIOUS_TABLE = {"oldA": ["oldB"]}


@pytest.fixture
def store(settings_file):
    return SettingsStore(settings_file)


@pytest.fixture
def settings():
    return PersistedSettings(site_url=SITE_URL, ignore_table=dict(PREVIOUS_TABLE))


@pytest.fixture
def make_orchestrator(settings, store):
    def _make(fetcher):
        ignore_state = IgnoreState(settings.ignore_table)
        orchestrator = RefreshOrchestrator(
            settings=settings,
            ignore_state=ignore_state,
            fetcher=fetcher,
            normalizer=IdentifierNormalizer(),
            store=store
        )
        return orchestrator, ignore_state
    return _make


class BlockingFetcher:
    """Fetcher that waits for `release` before returning its payload."""

    def __init__(self, payload):
        self.payload = payload
        self.started = threading.Event()
        self.release = threading.Event()

    def fetch(self, url):
        self.started.set()
        self.release.wait(timeout=5)
        return self.payload


class TestIgnoreState:
    def test_initial_snapshot_from_persisted_table(self):
        state = IgnoreState({"modA": ["modB"]})
        assert state.snapshot.ignore_table == {"modA": ["modB"]}
        assert len(state.snapshot.index) == 0

    def test_publish_replaces_reference(self):
        state = IgnoreState({"modA": ["modB"]})
        old = state.snapshot
        state.publish(IgnoreState({"x": []}).snapshot)
        assert state.snapshot is not old
        assert old.ignore_table == {"modA": ["modB"]}


class TestSuccessfulRefresh:
    @pytest.mark.asyncio
    async def test_scenario_table(self, make_orchestrator, stub_fetcher):
        feed = [
            {"Name": "Module A", "ModuleID": "modA", "Ignore": ["Module B"]},
            {"Name": "Module B", "ModuleID": "modB", "Ignore": []},
        ]
        orchestrator, state = make_orchestrator(stub_fetcher(payload=feed))

        result = await orchestrator.run()

        assert result.succeeded
        assert result.modules == 2
        assert state.snapshot.ignore_table == {"modA": ["modB"], "modB": []}
        assert orchestrator.state is RefreshState.IDLE
        assert orchestrator.loaded is True

    @pytest.mark.asyncio
    async def test_fetches_site_url(self, make_orchestrator, stub_fetcher):
        fetcher = stub_fetcher(payload=[])
        orchestrator, _ = make_orchestrator(fetcher)
        await orchestrator.run()
        assert fetcher.calls == [SITE_URL]

    @pytest.mark.asyncio
    async def test_persists_new_table(self, make_orchestrator, stub_fetcher, store, sample_feed, settings):
        orchestrator, state = make_orchestrator(stub_fetcher(payload=sample_feed))

        result = await orchestrator.run()

        assert result.saved is True
        reloaded = store.load()
        assert reloaded.ignore_table == state.snapshot.ignore_table
        assert reloaded.site_url == SITE_URL
        assert settings.ignore_table == state.snapshot.ignore_table

    @pytest.mark.asyncio
    async def test_table_replaced_not_merged(self, make_orchestrator, stub_fetcher, sample_feed):
        orchestrator, state = make_orchestrator(stub_fetcher(payload=sample_feed))
        await orchestrator.run()
        assert "oldA" not in state.snapshot.ignore_table

    @pytest.mark.asyncio
    async def test_failed_save_keeps_memory_state(self, make_orchestrator, stub_fetcher, sample_feed, store, monkeypatch):
        monkeypatch.setattr(store, "save", lambda settings: False)
        orchestrator, state = make_orchestrator(stub_fetcher(payload=sample_feed))

        result = await orchestrator.run()

        assert result.succeeded
        assert result.saved is False
        assert "MemoryV2" in state.snapshot.ignore_table
        assert orchestrator.loaded is True


class TestFailedRefresh:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [
        FeedTransportError(SITE_URL, "connection refused"),
        FeedStatusError(SITE_URL, 500),
        FeedShapeError(SITE_URL, "no array"),
    ])
    async def test_feed_error_keeps_previous_data(self, make_orchestrator, stub_fetcher, store, error):
        orchestrator, state = make_orchestrator(stub_fetcher(error=error))
        before = state.snapshot

        result = await orchestrator.run()

        assert not result.succeeded
        assert result.error == str(error)
        assert state.snapshot is before
        assert state.snapshot.ignore_table == PREVIOUS_TABLE
        assert orchestrator.state is RefreshState.FAILED
        assert orchestrator.loaded is True
        assert not store.exists()

    @pytest.mark.asyncio
    async def test_unexpected_error_still_sets_loaded(self, make_orchestrator, stub_fetcher):
        orchestrator, state = make_orchestrator(stub_fetcher(error=RuntimeError("boom")))
        result = await orchestrator.run()
        assert result.status == "failed"
        assert orchestrator.loaded is True
        assert state.snapshot.ignore_table == PREVIOUS_TABLE

    @pytest.mark.asyncio
    async def test_recovers_on_next_attempt(self, make_orchestrator, stub_fetcher, sample_feed):
        fetcher = stub_fetcher(error=FeedStatusError(SITE_URL, 503))
        orchestrator, state = make_orchestrator(fetcher)
        await orchestrator.run()

        fetcher.error = None
        fetcher.payload = sample_feed
        result = await orchestrator.run()

        assert result.succeeded
        assert orchestrator.state is RefreshState.IDLE
        assert "MemoryV2" in state.snapshot.ignore_table


class TestNonBlocking:
    @pytest.mark.asyncio
    async def test_start_returns_immediately(self, make_orchestrator, sample_feed):
        fetcher = BlockingFetcher(sample_feed)
        orchestrator, state = make_orchestrator(fetcher)

        task = orchestrator.start()
        await asyncio.to_thread(fetcher.started.wait, 5)

        # in flight: loop is free, flag cleared, old data still served
        assert orchestrator.state is RefreshState.FETCHING
        assert orchestrator.loaded is False
        assert state.snapshot.ignore_table == PREVIOUS_TABLE
        assert task in orchestrator.pending

        fetcher.release.set()
        result = await task

        assert result.succeeded
        assert orchestrator.loaded is True
        assert not orchestrator.pending

    @pytest.mark.asyncio
    async def test_start_outside_loop_fails(self, make_orchestrator, stub_fetcher):
        orchestrator, _ = make_orchestrator(stub_fetcher())

        def call_start():
            orchestrator.start()

        with pytest.raises(RuntimeError):
            await asyncio.to_thread(call_start)

    @pytest.mark.asyncio
    async def test_overlapping_attempts_last_completion_wins(self, make_orchestrator, stub_fetcher):
        first = BlockingFetcher([{"Name": "First", "ModuleID": "first", "Ignore": []}])
        orchestrator, state = make_orchestrator(first)

        slow = orchestrator.start()
        await asyncio.to_thread(first.started.wait, 5)

        # second attempt uses a different feed and completes first
        orchestrator._fetcher = stub_fetcher(payload=[{"Name": "Second", "ModuleID": "second", "Ignore": []}])
        fast = orchestrator.start()
        await fast
        assert state.snapshot.ignore_table == {"second": []}

        first.release.set()
        await slow
        assert state.snapshot.ignore_table == {"first": []}
        assert orchestrator.loaded is True

    @pytest.mark.asyncio
    async def test_start_clears_flag_before_task_runs(self, make_orchestrator, stub_fetcher, sample_feed):
        orchestrator, _ = make_orchestrator(stub_fetcher(payload=sample_feed))
        await orchestrator.run()
        assert orchestrator.loaded is True

        task = orchestrator.start()
        # no await yet: the task has not started executing
        assert orchestrator.loaded is False
        assert orchestrator.state is RefreshState.FETCHING

        await task
        assert orchestrator.loaded is True
        assert orchestrator.state is RefreshState.IDLE


class TestMalformedFeedRefreshes:
    @pytest.mark.asyncio
    async def test_repeated_refreshes_exclude_malformed_module(self, make_orchestrator, stub_fetcher, store):
        feed = [
            {"Name": "Bad", "ModuleID": "bad", "Ignore": ["ok", 3]},
            {"Name": "Good", "ModuleID": "good", "Ignore": ["Bad"]},
        ]
        orchestrator, state = make_orchestrator(stub_fetcher(payload=feed))

        await orchestrator.run()
        first = dict(state.snapshot.ignore_table)
        await orchestrator.run()
        second = dict(state.snapshot.ignore_table)

        assert first == second == {"good": ["bad"]}
        assert "bad" not in store.load().ignore_table
