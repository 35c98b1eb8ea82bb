"""Session state storage for the UCPF tools.

A bounded in-memory store with least-recently-used eviction and a periodic
expiry sweep. One store is created by the process entry point and handed to
every tool handler that needs it.

Usage:
    # Defaults (state disabled, 30 minute expiry, 100 sessions)
    session:
      enabled: false
      expiry_seconds: 1800
      max_sessions: 100
      sweep_interval_seconds: 60

    # Or via environment variables
    SESSION_ENABLED=true
    SESSION_EXPIRY=600
    SESSION_MAX=50
    SESSION_SWEEP_INTERVAL=30

Semantics:
    - Disabled store: reads return None, writes are dropped, and disabling
      clears everything.
    - ``clear``/``clear_all``/``count``/``has`` work regardless of the flag.
    - Writing a new key to a full store evicts the least recently read or
      written entry first.
    - ``get`` and ``sessions`` return copies of payloads; changes go through
      ``set``.
"""
from __future__ import annotations

import logging
import os
import threading
import time
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from cachetools import Cache, LRUCache

from deeplucid.settings import SessionConfig, load_settings

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_SECONDS = 30 * 60
DEFAULT_MAX_SESSIONS = 100
DEFAULT_SWEEP_INTERVAL_SECONDS = 60


@dataclass
class SessionEntry:
    """One stored session: payload plus creation/access timestamps."""

    key: str
    created_at: float
    last_accessed_at: float
    payload: dict[str, Any] = field(default_factory=dict)

    def idle_for(self, now: float) -> float:
        return now - self.last_accessed_at


class _SessionCache(LRUCache):
    """LRUCache that logs capacity evictions and supports recency-free reads."""

    def popitem(self):
        key, entry = super().popitem()
        logger.debug("Evicted least recently used session '%s'", key)
        return key, entry

    def peek(self, key: str) -> SessionEntry | None:
        """Return an entry without refreshing its LRU position."""
        if key not in self:
            return None
        return Cache.__getitem__(self, key)


class SessionStore:
    """Bounded, expiring, in-memory session store.

    Suitable for single-process deployments. All access to the entry mapping
    goes through an ``RLock`` so tool handlers running on worker threads and
    the background sweeper never interleave inside an operation.
    """

    def __init__(
        self,
        enabled: bool = False,
        expiry: float = DEFAULT_EXPIRY_SECONDS,
        capacity: int = DEFAULT_MAX_SESSIONS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._enabled = bool(enabled)
        self._expiry = expiry
        self._capacity = capacity
        self._clock = clock
        self._lock = threading.RLock()
        self._cache = self._new_cache()

    def _new_cache(self) -> _SessionCache:
        return _SessionCache(maxsize=max(self._capacity, 0))

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def expiry(self) -> float:
        return self._expiry

    @property
    def capacity(self) -> int:
        return self._capacity

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable the store. Disabling drops every session."""
        enabled = bool(enabled)
        with self._lock:
            was_enabled = self._enabled
            self._enabled = enabled
            if not enabled:
                self._cache = self._new_cache()
        if was_enabled != enabled:
            logger.info("Session state %s", "enabled" if enabled else "disabled")

    def get(self, key: str) -> dict[str, Any] | None:
        """Return a copy of the payload for ``key`` and mark it as recently used."""
        with self._lock:
            if not self._enabled or key not in self._cache:
                return None
            entry: SessionEntry = self._cache[key]
            entry.last_accessed_at = max(self._clock(), entry.created_at)
            return dict(entry.payload)

    def set(self, key: str, payload: dict[str, Any]) -> None:
        """Store ``payload`` under ``key``, replacing any previous payload.

        Silently dropped while disabled. Callers that need to know whether the
        write landed must check ``enabled`` themselves.
        """
        with self._lock:
            if not self._enabled or self._capacity <= 0:
                return
            now = self._clock()
            entry = self._cache.peek(key)
            if entry is not None:
                entry.payload = dict(payload)
                entry.last_accessed_at = max(now, entry.created_at)
            else:
                entry = SessionEntry(
                    key=key,
                    created_at=now,
                    last_accessed_at=now,
                    payload=dict(payload),
                )
            # LRUCache evicts the least recently used key before inserting a new one.
            self._cache[key] = entry

    def clear(self, key: str) -> bool:
        """Remove one session. Honored even while disabled."""
        with self._lock:
            return self._cache.pop(key, None) is not None

    def clear_all(self) -> None:
        with self._lock:
            self._cache = self._new_cache()

    def count(self) -> int:
        with self._lock:
            return len(self._cache)

    def has(self, key: str) -> bool:
        with self._lock:
            return key in self._cache

    def sessions(self) -> list[SessionEntry]:
        """Snapshot of all entries, least recently used first."""
        with self._lock:
            entries = []
            for key in list(self._cache):
                entry = self._cache.peek(key)
                entries.append(replace(entry, payload=dict(entry.payload)))
        return sorted(entries, key=lambda e: e.last_accessed_at)

    def _sweep(self) -> int:
        """Drop sessions idle longer than the expiry. Returns how many were removed."""
        with self._lock:
            if not self._enabled:
                return 0
            keys = list(self._cache)
        removed = 0
        for key in keys:
            # Recheck under the lock so a concurrent get() keeps its entry.
            with self._lock:
                entry = self._cache.peek(key) if self._enabled else None
                if entry is None or entry.idle_for(self._clock()) <= self._expiry:
                    continue
                del self._cache[key]
                removed += 1
        if removed:
            logger.debug("Swept %d expired session(s)", removed)
        return removed


class SessionSweeper:
    """Daemon thread that periodically sweeps expired sessions from a store.

    The tick runs for the sweeper's whole lifetime; the store decides on each
    tick whether there is anything to do based on its current ``enabled`` flag.
    """

    def __init__(self, store: SessionStore, interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS):
        self._store = store
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        if self._interval <= 0:
            logger.warning("Session sweep interval %s is not positive; sweeper not started", self._interval)
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="deeplucid-session-sweeper", daemon=True
        )
        self._thread.start()
        logger.debug("Session sweeper started (every %ss)", self._interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def tick(self) -> int:
        try:
            return self._store._sweep()
        except Exception:
            logger.exception("Session sweep failed")
            return 0

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self.tick()


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def _load_session_config() -> SessionConfig | None:
    """Best-effort settings loader for session config."""
    try:
        return load_settings().session
    except Exception:
        logger.debug("Could not load project settings; using session defaults", exc_info=True)
        return None


def _int_with_default(value: str | None, default: int) -> int:
    """Parse int env values safely with fallback."""
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _float_with_default(value: str | None, default: float) -> float:
    try:
        return float(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _bool_with_default(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def resolve_session_config(base: SessionConfig | None = None) -> SessionConfig:
    """Resolve session settings. Precedence: env vars > deeplucid_project.yaml > defaults.

    ``base`` replaces the yaml lookup when the caller already loaded settings.
    """
    cfg = base or _load_session_config() or SessionConfig()
    return SessionConfig(
        enabled=_bool_with_default(os.getenv("SESSION_ENABLED"), cfg.enabled),
        expiry_seconds=_float_with_default(os.getenv("SESSION_EXPIRY"), cfg.expiry_seconds),
        max_sessions=_int_with_default(os.getenv("SESSION_MAX"), cfg.max_sessions),
        sweep_interval_seconds=_float_with_default(
            os.getenv("SESSION_SWEEP_INTERVAL"), cfg.sweep_interval_seconds
        ),
    )


def create_session_store(config: SessionConfig | None = None) -> SessionStore:
    """Factory to create the session store from resolved configuration."""
    cfg = config or resolve_session_config()
    return SessionStore(
        enabled=cfg.enabled,
        expiry=cfg.expiry_seconds,
        capacity=cfg.max_sessions,
    )
