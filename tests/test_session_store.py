from __future__ import annotations

import threading

import pytest

from deeplucid import session as session_mod
from deeplucid.session import SessionStore, SessionSweeper
from deeplucid.settings import SessionConfig


class FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _store(clock: FakeClock, **kwargs) -> SessionStore:
    kwargs.setdefault("enabled", True)
    return SessionStore(clock=clock, **kwargs)


# ---------------------------------------------------------------------------
# Basic operations
# ---------------------------------------------------------------------------


def test_set_get_roundtrip(clock):
    store = _store(clock)
    state = {"analysis": "## Report", "problem": "p"}
    store.set("s1", state)
    assert store.get("s1") == state
    assert store.clear("s1") is True
    assert store.get("s1") is None


def test_get_unknown_key_returns_none_without_side_effects(clock):
    store = _store(clock)
    assert store.get("missing") is None
    assert store.count() == 0
    assert store.has("missing") is False


def test_set_copies_payload_mapping(clock):
    store = _store(clock)
    payload = {"a": 1}
    store.set("s1", payload)
    payload["a"] = 2
    assert store.get("s1") == {"a": 1}


def test_get_and_sessions_return_payload_copies(clock):
    store = _store(clock)
    store.set("s1", {"a": 1})

    store.get("s1")["a"] = 2
    store.sessions()[0].payload["a"] = 3

    assert store.get("s1") == {"a": 1}


def test_update_replaces_payload_without_duplicating(clock):
    store = _store(clock)
    store.set("k", {"a": 1, "keep": True})
    store.set("k", {"b": 2})
    assert store.count() == 1
    assert store.get("k") == {"b": 2}


def test_update_keeps_created_at_and_refreshes_access(clock):
    store = _store(clock)
    store.set("k", {"v": 1})
    clock.advance(10)
    store.set("k", {"v": 2})
    (entry,) = store.sessions()
    assert entry.created_at == 0
    assert entry.last_accessed_at == 10


def test_recency_is_monotonic_across_get_set_get(clock):
    store = _store(clock)
    store.set("k", {})
    seen = []
    for op in ("get", "set", "get"):
        clock.advance(1)
        if op == "get":
            store.get("k")
        else:
            store.set("k", {"x": 1})
        seen.append(store.sessions()[0].last_accessed_at)
    assert seen == sorted(seen)
    assert all(e.last_accessed_at >= e.created_at for e in store.sessions())


def test_has_and_sessions_do_not_refresh_recency(clock):
    store = _store(clock, capacity=2)
    store.set("a", {})
    clock.advance(1)
    store.set("b", {})
    clock.advance(1)
    assert store.has("a")
    assert [e.key for e in store.sessions()] == ["a", "b"]

    store.set("c", {})

    assert store.has("a") is False
    assert store.has("b") and store.has("c")


def test_clear_is_idempotent(clock):
    store = _store(clock)
    store.set("k", {})
    assert store.clear("k") is True
    assert store.clear("k") is False


def test_clear_all_and_count(clock):
    store = _store(clock)
    for key in ("a", "b", "c"):
        store.set(key, {})
    assert store.count() == 3
    store.clear_all()
    assert store.count() == 0


# ---------------------------------------------------------------------------
# Capacity / LRU eviction
# ---------------------------------------------------------------------------


def test_capacity_is_never_exceeded(clock):
    store = _store(clock, capacity=3)
    for i in range(20):
        clock.advance(1)
        store.set(f"k{i}", {"i": i})
        assert store.count() <= 3


def test_evicts_least_recently_used(clock):
    store = _store(clock, capacity=2)
    store.set("a", {"v": 1})
    clock.advance(1)
    store.set("b", {"v": 2})
    clock.advance(1)
    store.get("a")
    clock.advance(1)
    store.set("c", {"v": 3})

    assert store.has("b") is False
    assert store.has("a") is True
    assert store.has("c") is True


def test_evicts_exactly_the_untouched_key(clock):
    capacity = 5
    store = _store(clock, capacity=capacity)
    keys = [f"k{i}" for i in range(capacity)]
    for key in keys:
        clock.advance(1)
        store.set(key, {})
    for key in keys[1:]:
        clock.advance(1)
        store.get(key)

    clock.advance(1)
    store.set("new", {})

    assert store.has(keys[0]) is False
    assert all(store.has(k) for k in keys[1:])
    assert store.count() == capacity


def test_eviction_ties_are_deterministic(clock):
    # Frozen clock: every entry shares the same timestamp.
    store = _store(clock, capacity=2)
    store.set("a", {})
    store.set("b", {})
    store.set("c", {})
    assert store.has("a") is False
    assert store.has("b") and store.has("c")


def test_updating_existing_key_does_not_evict(clock):
    store = _store(clock, capacity=2)
    store.set("a", {})
    store.set("b", {})
    store.set("a", {"v": 2})
    assert store.count() == 2
    assert store.has("b")


def test_zero_capacity_retains_nothing(clock):
    store = _store(clock, capacity=0)
    store.set("a", {"v": 1})
    assert store.count() == 0
    assert store.get("a") is None


# ---------------------------------------------------------------------------
# Enabled flag
# ---------------------------------------------------------------------------


def test_disabled_store_drops_reads_and_writes(clock):
    store = _store(clock, enabled=False)
    store.set("x", {"v": 1})
    assert store.get("x") is None
    assert store.count() == 0


def test_disabling_clears_everything_until_reenabled(clock):
    store = _store(clock)
    store.set("a", {})
    store.set("b", {})

    store.set_enabled(False)
    assert store.count() == 0
    store.set("c", {})
    assert store.get("a") is None
    assert store.count() == 0

    store.set_enabled(True)
    assert store.count() == 0
    store.set("c", {})
    assert store.count() == 1


def test_set_enabled_is_idempotent(clock):
    store = _store(clock)
    store.set("a", {})
    store.set_enabled(True)
    assert store.count() == 1
    store.set_enabled(False)
    store.set_enabled(False)
    assert store.enabled is False
    assert store.count() == 0


def test_clear_is_honored_while_disabled(clock):
    store = _store(clock)
    store.set("a", {})
    # Bypass the disable-clears-all path to exercise clear() on a disabled store.
    store._enabled = False
    assert store.has("a") is True
    assert store.clear("a") is True
    assert store.clear("a") is False


# ---------------------------------------------------------------------------
# Expiry sweep
# ---------------------------------------------------------------------------


def test_sweep_removes_idle_sessions(clock):
    store = _store(clock, expiry=1.0)
    store.set("a", {"v": 1})
    clock.advance(1.5)
    assert store._sweep() == 1
    assert store.has("a") is False


def test_sweep_keeps_recently_accessed_sessions(clock):
    store = _store(clock, expiry=10)
    store.set("old", {})
    store.set("fresh", {})
    clock.advance(8)
    store.get("fresh")
    clock.advance(5)

    store._sweep()

    assert store.has("old") is False
    assert store.has("fresh") is True


def test_entries_survive_between_sweeps(clock):
    store = _store(clock, expiry=1.0)
    store.set("a", {})
    clock.advance(5)
    # Expired but not yet swept.
    assert store.has("a") is True


def test_sweep_is_noop_while_disabled_and_applies_after_enabling(clock):
    store = _store(clock, enabled=False, expiry=1.0)
    assert store._sweep() == 0

    store.set_enabled(True)
    store.set("a", {})
    clock.advance(2)
    assert store._sweep() == 1


def test_zero_expiry_sweeps_any_idle_session(clock):
    store = _store(clock, expiry=0)
    store.set("a", {})
    assert store._sweep() == 0
    clock.advance(0.001)
    assert store._sweep() == 1


def test_sweeper_tick_delegates_to_store(clock):
    store = _store(clock, expiry=1.0)
    store.set("a", {})
    clock.advance(2)
    sweeper = SessionSweeper(store, interval=60)
    assert sweeper.tick() == 1
    assert store.count() == 0


def test_sweeper_tick_logs_and_survives_errors(monkeypatch, clock, caplog):
    store = _store(clock)

    def boom():
        raise RuntimeError("boom")

    monkeypatch.setattr(store, "_sweep", boom)
    sweeper = SessionSweeper(store, interval=60)
    assert sweeper.tick() == 0
    assert "Session sweep failed" in caplog.text


def test_sweeper_thread_runs_and_stops():
    store = SessionStore(enabled=True, expiry=0)
    swept = threading.Event()
    real_sweep = store._sweep

    def sweep():
        swept.set()
        return real_sweep()

    store._sweep = sweep
    sweeper = SessionSweeper(store, interval=0.01)
    sweeper.start()
    sweeper.start()
    try:
        assert swept.wait(2.0)
        assert sweeper.running
    finally:
        sweeper.stop()
    assert sweeper.running is False


def test_sweeper_with_non_positive_interval_does_not_start():
    sweeper = SessionSweeper(SessionStore(enabled=True), interval=0)
    sweeper.start()
    assert sweeper.running is False


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


class InterleavingLock:
    """Wraps a store's lock and runs ``action`` on another thread just before
    the ``on_entry``-th acquisition, forcing that interleaving."""

    def __init__(self, lock, action, on_entry: int = 1):
        self._lock = lock
        self._action = action
        self._on_entry = on_entry
        self._entries = 0

    def __enter__(self):
        self._entries += 1
        if self._entries == self._on_entry:
            worker = threading.Thread(target=self._action)
            worker.start()
            worker.join()
        return self._lock.__enter__()

    def __exit__(self, *exc_info):
        return self._lock.__exit__(*exc_info)


def test_disable_racing_a_set_leaves_store_empty(clock):
    store = _store(clock)
    store._lock = InterleavingLock(store._lock, lambda: store.set_enabled(False))

    store.set("a", {"v": 1})

    assert store.enabled is False
    assert store.count() == 0


def test_disable_racing_a_get_returns_none(clock):
    store = _store(clock)
    store.set("a", {"v": 1})
    store._lock = InterleavingLock(store._lock, lambda: store.set_enabled(False))

    assert store.get("a") is None


def test_get_during_sweep_keeps_refreshed_entry(clock):
    store = _store(clock, expiry=10)
    store.set("a", {})
    store.set("b", {})
    clock.advance(20)
    # First acquisition snapshots the keys; the refresh lands before the recheck.
    store._lock = InterleavingLock(store._lock, lambda: store.get("a"), on_entry=2)

    assert store._sweep() == 1
    assert store.has("a") is True
    assert store.has("b") is False


def test_concurrent_sets_never_exceed_capacity():
    capacity = 10
    store = SessionStore(enabled=True, capacity=capacity)
    barrier = threading.Barrier(8)
    observed = []

    def writer(worker: int):
        barrier.wait()
        for i in range(200):
            store.set(f"w{worker}-{i}", {"i": i})
            observed.append(store.count())

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert max(observed) <= capacity
    assert store.count() == capacity


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def test_create_session_store_uses_defaults_when_not_configured(monkeypatch):
    for var in ("SESSION_ENABLED", "SESSION_EXPIRY", "SESSION_MAX", "SESSION_SWEEP_INTERVAL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(session_mod, "_load_session_config", lambda: None)

    store = session_mod.create_session_store()

    assert store.enabled is False
    assert store.capacity == 100
    assert store.expiry == 1800


def test_create_session_store_uses_yaml_values(monkeypatch):
    for var in ("SESSION_ENABLED", "SESSION_EXPIRY", "SESSION_MAX", "SESSION_SWEEP_INTERVAL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(
        session_mod,
        "_load_session_config",
        lambda: SessionConfig(enabled=True, expiry_seconds=111, max_sessions=222),
    )

    store = session_mod.create_session_store()

    assert store.enabled is True
    assert store.capacity == 222
    assert store.expiry == 111


def test_env_overrides_yaml(monkeypatch):
    monkeypatch.setenv("SESSION_ENABLED", "false")
    monkeypatch.setenv("SESSION_EXPIRY", "333")
    monkeypatch.setenv("SESSION_MAX", "444")
    monkeypatch.setenv("SESSION_SWEEP_INTERVAL", "5")
    monkeypatch.setattr(
        session_mod,
        "_load_session_config",
        lambda: SessionConfig(enabled=True, expiry_seconds=111, max_sessions=222),
    )

    cfg = session_mod.resolve_session_config()

    assert cfg == SessionConfig(
        enabled=False, expiry_seconds=333, max_sessions=444, sweep_interval_seconds=5
    )


def test_invalid_env_values_fall_back(monkeypatch):
    monkeypatch.setenv("SESSION_ENABLED", "maybe")
    monkeypatch.setenv("SESSION_EXPIRY", "soon")
    monkeypatch.setenv("SESSION_MAX", "lots")
    monkeypatch.delenv("SESSION_SWEEP_INTERVAL", raising=False)
    monkeypatch.setattr(
        session_mod,
        "_load_session_config",
        lambda: SessionConfig(enabled=True, expiry_seconds=111, max_sessions=222),
    )

    cfg = session_mod.resolve_session_config()

    assert cfg.enabled is True
    assert cfg.expiry_seconds == 111
    assert cfg.max_sessions == 222
    assert cfg.sweep_interval_seconds == 60
