"""Periodic merge of live game state into the tracker.

The live source is any callable returning the memory-state document (the
``/api/memory`` payload of the game hook). Polling runs on a
``threading.Timer`` that is always cancelled before being rescheduled, so
at most one timer is ever pending.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from smstracker.tracker import Tracker

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 5.0


@dataclass
class MemoryState:
    """A snapshot of the live game as reported by the hook."""

    is_hooked: bool = False
    current_level: str = ""
    current_episode: str = ""
    unlocks: dict[str, bool] = field(default_factory=dict)
    interval: float | None = None
    auto_track: bool | None = None
    seed: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MemoryState:
        """Create MemoryState from the hook's JSON payload."""
        interval = data.get("interval")
        auto_track = data.get("auto_track")
        return cls(
            is_hooked=bool(data.get("is_hooked", False)),
            current_level=data.get("current_level") or "",
            current_episode=data.get("current_episode") or "",
            unlocks={str(k): bool(v) for k, v in (data.get("unlocks") or {}).items()},
            interval=float(interval) if interval else None,
            auto_track=bool(auto_track) if auto_track is not None else None,
            seed=data.get("seed") or "",
        )


class TimerLike(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerLike]
FetchFunc = Callable[[], dict[str, Any]]


def _daemon_timer(interval: float, callback: Callable[[], None]) -> TimerLike:
    timer = threading.Timer(interval, callback)
    timer.daemon = True
    return timer


class AutoTracker:
    """Poll a live state source and merge its unlocks into a tracker."""

    def __init__(
        self,
        tracker: Tracker,
        fetch: FetchFunc,
        interval: float = DEFAULT_INTERVAL,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.tracker = tracker
        self.fetch = fetch
        self.interval = interval
        self.timer_factory = timer_factory
        self.connected = False
        self.last_state: MemoryState | None = None
        self._timer: TimerLike | None = None
        self._first_poll = True
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._timer is not None

    def start(self, interval: float | None = None) -> None:
        """Start or restart polling, cancelling any pending timer first."""
        with self._lock:
            if interval is not None:
                if interval <= 0:
                    raise ValueError(f"interval must be positive, got {interval}")
                self.interval = interval
            self._cancel()
            self._schedule()
        logger.info("Auto-tracking every %.1fs", self.interval)

    def stop(self) -> None:
        with self._lock:
            self._cancel()
        self.connected = False

    def _cancel(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _schedule(self) -> None:
        timer: TimerLike | None = None

        def fire() -> None:
            self._tick(timer)

        timer = self.timer_factory(self.interval, fire)
        self._timer = timer
        timer.start()

    def _tick(self, fired: TimerLike | None) -> None:
        # A timer cancelled or replaced after it started running must neither
        # poll nor re-arm.
        with self._lock:
            if fired is None or self._timer is not fired:
                return
        try:
            self.poll()
        except Exception:  # noqa: BLE001
            logger.exception("Auto-track poll failed")
        with self._lock:
            if self._timer is fired:
                self._schedule()

    def poll(self) -> bool:
        """Fetch one state snapshot and merge it.

        The first successful poll adopts the source's interval and
        auto-track defaults. A later interval change restarts the timer.

        Returns:
            True if any unlock changed.
        """
        try:
            state = MemoryState.from_dict(self.fetch())
        except Exception as e:  # noqa: BLE001
            logger.error("Memory source error: %s", e)
            self.connected = False
            return False

        self.last_state = state
        self.connected = state.is_hooked

        if self._first_poll:
            self._first_poll = False
            if state.auto_track is not None:
                self.tracker.auto_track = state.auto_track
            if state.interval and state.interval != self.interval:
                self.interval = state.interval
                if self.running:
                    self.start()
        elif state.interval and state.interval != self.interval:
            logger.info(
                "Interval changed from %.1fs to %.1fs", self.interval, state.interval
            )
            if self.running:
                self.start(state.interval)
            else:
                self.interval = state.interval
            return False

        if not state.is_hooked:
            return False
        return self.tracker.apply_memory_state(state)


def file_source(path: Path) -> FetchFunc:
    """Fetch function reading a memory-state JSON document from disk."""
    path = Path(path)

    def fetch() -> dict[str, Any]:
        with open(path, encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
        return data

    return fetch
