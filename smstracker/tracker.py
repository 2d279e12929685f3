"""Tracker session: stores, walker and aggregator behind one lock.

Every mutation recomputes the summary before returning, so callers never
observe a store change without its aggregates. The memory poller runs on a
timer thread; the lock serializes its merges with user edits.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from smstracker.aggregate import Aggregator, TrackerSummary
from smstracker.gate import BossGate
from smstracker.persistence import Snapshot
from smstracker.stores import AssignmentStore, ProgressStore, ShineStatus
from smstracker.walker import GraphWalker
from smstracker.world import CoinKey, RoutingKey, WorldData

if TYPE_CHECKING:
    from smstracker.autotrack import MemoryState

logger = logging.getLogger(__name__)

Listener = Callable[[TrackerSummary], None]


class FixedRouteError(ValueError):
    """Raised when assigning a route whose destination is fixed by the game."""


class Tracker:
    """A single player's tracking session over one world."""

    def __init__(
        self,
        world: WorldData,
        assignments: AssignmentStore,
        progress: ProgressStore,
        gate: BossGate,
        auto_track: bool = False,
    ) -> None:
        self.world = world
        self.assignments = assignments
        self.progress = progress
        self.gate = gate
        self.walker = GraphWalker(world, assignments, progress)
        self.aggregator = Aggregator(world, self.walker, gate)
        self.auto_track = auto_track
        self.listeners: list[Listener] = []
        self._lock = threading.RLock()
        self.summary = self.aggregator.summary()

    @classmethod
    def from_world(cls, world: WorldData, auto_track: bool = False) -> Tracker:
        """Create a session with empty progress and the fixed boss route."""
        progress = ProgressStore()
        gate = BossGate(world, progress)
        assignments = AssignmentStore(fixed={gate.routing_key: gate.destination})
        return cls(world, assignments, progress, gate, auto_track=auto_track)

    @property
    def gate_open(self) -> bool:
        return self.summary.gate_open

    def subscribe(self, listener: Listener) -> None:
        self.listeners.append(listener)

    def refresh(self) -> TrackerSummary:
        """Recompute every aggregate and notify listeners."""
        with self._lock:
            was_open = self.summary.gate_open
            self.summary = self.aggregator.summary()
            if self.summary.gate_open != was_open:
                if self.summary.gate_open:
                    logger.info("Boss gate opened: boss route is now reachable")
                else:
                    logger.info("Boss gate closed: boss route detached")
            for listener in self.listeners:
                listener(self.summary)
            return self.summary

    # ---------- Assignments ----------

    def assign(self, key: RoutingKey, zone_id: str | None) -> None:
        """Assign an entrance or exit to a zone (None or "" clears it).

        Raises:
            FixedRouteError: If the key is the fixed boss route.
        """
        with self._lock:
            if self.assignments.is_fixed(key):
                raise FixedRouteError(f"Route '{key}' is fixed and cannot be assigned")
            self.assignments.set(key, zone_id)
            logger.debug("Assigned %s -> %s", key, zone_id or "<unassigned>")
            self.refresh()

    # ---------- Progress ----------

    def cycle_shine(self, shine_id: str) -> ShineStatus:
        with self._lock:
            status = self.progress.cycle_shine(shine_id)
            self.refresh()
            return status

    def set_shine_status(self, shine_id: str, status: ShineStatus) -> None:
        with self._lock:
            self.progress.set_shine_status(shine_id, status)
            self.refresh()

    def toggle_coin(self, key: CoinKey) -> bool:
        with self._lock:
            collected = self.progress.toggle_coin(key)
            self.refresh()
            return collected

    def toggle_unlock(self, unlock_id: str) -> bool:
        """Toggle an unlock by hand.

        Manual toggles are ignored while auto-tracking owns the unlocks.

        Returns:
            True if the toggle was applied.
        """
        with self._lock:
            if self.auto_track:
                logger.info("Manual unlock toggle ignored while auto-tracking")
                return False
            self.progress.toggle_unlock(unlock_id)
            self.refresh()
            return True

    def set_collapsed(self, element_id: str, collapsed: bool) -> None:
        """Record a collapsed UI row. Does not affect any aggregate."""
        with self._lock:
            if collapsed:
                self.progress.collapsed.add(element_id)
            else:
                self.progress.collapsed.discard(element_id)

    def apply_memory_state(self, state: MemoryState) -> bool:
        """Merge an unlock snapshot from the live game.

        Ignored when auto-tracking is off or the game is not hooked.

        Returns:
            True if any unlock changed.
        """
        with self._lock:
            if not self.auto_track or not state.is_hooked:
                return False
            changed = self.progress.merge_unlocks(state.unlocks)
            if changed:
                self.refresh()
            return changed

    # ---------- Persistence ----------

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot.capture(self.assignments, self.progress)

    def load_snapshot(self, snapshot: Snapshot) -> None:
        """Replace session state with an already-validated snapshot."""
        with self._lock:
            snapshot.apply(self.assignments, self.progress)
            logger.info(
                "Loaded save: %d assignments, %d shines collected",
                len(self.assignments),
                len(self.progress.collected_shines),
            )
            self.refresh()
