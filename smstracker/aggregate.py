"""Completion statistics over walk results.

Counts are always sizes of identifier sets. Walks from several entrances are
merged as sets before counting, so a zone reached by two routes is counted
once.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from smstracker.walker import WalkResult
from smstracker.world import HUB_GROUP, HUB_ZONE_ID, Entrance, RoutingKey

if TYPE_CHECKING:
    from smstracker.gate import BossGate, GateLevel
    from smstracker.walker import GraphWalker
    from smstracker.world import WorldData


class CompletionState(Enum):
    """Completion of one collectible category."""

    NOT_APPLICABLE = "n/a"  # Nothing to collect; never reported as done
    IN_PROGRESS = "in_progress"
    DONE = "done"


@dataclass(frozen=True)
class CategoryStats:
    """Found and total identifiers for one category."""

    found: frozenset = frozenset()
    total: frozenset = frozenset()

    @property
    def found_count(self) -> int:
        return len(self.found)

    @property
    def total_count(self) -> int:
        return len(self.total)

    @property
    def state(self) -> CompletionState:
        if not self.total:
            return CompletionState.NOT_APPLICABLE
        if len(self.found) == len(self.total):
            return CompletionState.DONE
        return CompletionState.IN_PROGRESS

    @property
    def is_done(self) -> bool:
        return self.state is CompletionState.DONE

    def __str__(self) -> str:
        return f"{self.found_count}/{self.total_count}"


@dataclass(frozen=True)
class Completion:
    """Shine and blue coin completion for a selection of routes."""

    shines: CategoryStats = field(default_factory=CategoryStats)
    coins: CategoryStats = field(default_factory=CategoryStats)

    @property
    def shines_found(self) -> int:
        return self.shines.found_count

    @property
    def shines_total(self) -> int:
        return self.shines.total_count

    @property
    def coins_found(self) -> int:
        return self.coins.found_count

    @property
    def coins_total(self) -> int:
        return self.coins.total_count

    @property
    def is_empty(self) -> bool:
        return not self.shines.total and not self.coins.total

    @classmethod
    def from_walk(cls, result: WalkResult) -> Completion:
        """Build completion from a walk.

        Excluded shines are out of completion scope and leave the totals.
        """
        in_scope = result.shines_total - result.shines_excluded
        return cls(
            shines=CategoryStats(
                found=frozenset(result.shines_found & in_scope),
                total=frozenset(in_scope),
            ),
            coins=CategoryStats(
                found=frozenset(result.coins_found & result.coins_total),
                total=frozenset(result.coins_total),
            ),
        )


@dataclass
class TrackerSummary:
    """Every aggregate the tracker shows, recomputed after each mutation."""

    world: Completion
    hub: Completion
    groups: dict[str, Completion]
    routes: dict[str, Completion]
    gate_open: bool
    gate_progress: list[tuple[GateLevel, bool]]


class Aggregator:
    """Aggregate walks for a route, an entrance group, or the whole world."""

    def __init__(
        self,
        world: WorldData,
        walker: GraphWalker,
        gate: BossGate,
        hub_zone_id: str = HUB_ZONE_ID,
        hub_group: str = HUB_GROUP,
    ) -> None:
        self.world = world
        self.walker = walker
        self.gate = gate
        self.hub_zone_id = hub_zone_id
        self.hub_group = hub_group

    # ---------- Walk level ----------

    def walk_entrance(self, entrance: Entrance) -> WalkResult:
        """Walk one entrance.

        Static plaza shines are added directly; the boss entrance follows
        its fixed route only while the gate is open.
        """
        if not entrance.is_warp:
            return self._static_shine(entrance.id)
        if entrance.id == self.gate.entrance_id:
            return self.gate.walk(self.walker)
        return self.walker.walk(entrance.routing_key)

    def walk_group(self, group_name: str) -> WalkResult:
        result = WalkResult()
        if group_name == self.hub_group:
            result.merge(self.walk_hub())
        for entrance in self.world.entrances_in_group(group_name):
            result.merge(self.walk_entrance(entrance))
        return result

    def walk_hub(self) -> WalkResult:
        """Hub zone contents plus every static plaza shine."""
        result = self.walker.zone_contents(self.hub_zone_id)
        for entrance in self.world.static_entrances():
            result.merge(self._static_shine(entrance.id))
        return result

    def walk_world(self) -> WalkResult:
        result = self.walk_hub()
        for group_name in self.world.entrance_groups():
            result.merge(self.walk_group(group_name))
        result.merge(self.gate.walk(self.walker))
        return result

    def _static_shine(self, shine_id: str) -> WalkResult:
        result = WalkResult(shines_total={shine_id})
        if self.walker.progress.is_collected(shine_id):
            result.shines_found.add(shine_id)
        elif self.walker.progress.is_excluded(shine_id):
            result.shines_excluded.add(shine_id)
        return result

    # ---------- Completion level ----------

    def route(self, key: RoutingKey) -> Completion:
        """Completion of everything reachable through one routing key."""
        if key == self.gate.routing_key:
            return Completion.from_walk(self.gate.walk(self.walker))
        return Completion.from_walk(self.walker.walk(key))

    def group(self, group_name: str) -> Completion:
        return Completion.from_walk(self.walk_group(group_name))

    def hub(self) -> Completion:
        return Completion.from_walk(self.walk_hub())

    def world_completion(self) -> Completion:
        return Completion.from_walk(self.walk_world())

    def summary(self) -> TrackerSummary:
        routes = {
            entrance.id: self.route(entrance.routing_key)
            for entrance in self.world.entrances
            if entrance.is_warp and entrance.id != self.gate.entrance_id
        }
        return TrackerSummary(
            world=self.world_completion(),
            hub=self.hub(),
            groups={g: self.group(g) for g in self.world.entrance_groups()},
            routes=routes,
            gate_open=self.gate.is_open(),
            gate_progress=self.gate.progress_by_level(),
        )
