"""Boss gate: the predicate controlling access to the final boss route.

The boss entrance opens once the designated shine of every gating level
has been collected. Its destination is fixed by the game, not by the
player's assignments.
"""

from __future__ import annotations

from dataclasses import dataclass

from smstracker.stores import ProgressStore
from smstracker.walker import GraphWalker, RouteNode, WalkResult
from smstracker.world import BOSS_ENTRANCE_ID, BOSS_ZONE_ID, RoutingKey, WorldData


@dataclass(frozen=True)
class GateLevel:
    """A level whose first shine is required to open the gate."""

    zone_id: str
    name: str


DEFAULT_GATE_LEVELS: tuple[GateLevel, ...] = (
    GateLevel("bianco6", "Bianco"),
    GateLevel("ricco6", "Ricco"),
    GateLevel("mamma6", "Gelato"),
    GateLevel("pinnaParco4", "Pinna"),
    GateLevel("delfino3", "Sirena"),
    GateLevel("mare6", "Noki"),
    GateLevel("monte6", "Pianta"),
)


class BossGate:
    """Gate state derived from the progress store on every query."""

    def __init__(
        self,
        world: WorldData,
        progress: ProgressStore,
        levels: tuple[GateLevel, ...] = DEFAULT_GATE_LEVELS,
        entrance_id: str = BOSS_ENTRANCE_ID,
        destination: str = BOSS_ZONE_ID,
    ) -> None:
        self.world = world
        self.progress = progress
        self.levels = levels
        self.entrance_id = entrance_id
        self.destination = destination

    @property
    def routing_key(self) -> RoutingKey:
        return RoutingKey.for_entrance(self.entrance_id)

    def designated_shine(self, level: GateLevel) -> str | None:
        """The gating shine of a level: the first shine listed for its zone."""
        zone = self.world.get_zone(level.zone_id)
        if zone is None or not zone.shines:
            return None
        return zone.shines[0].id

    def designated_shines(self) -> list[str]:
        shines = []
        for level in self.levels:
            shine_id = self.designated_shine(level)
            if shine_id is not None:
                shines.append(shine_id)
        return shines

    def progress_by_level(self) -> list[tuple[GateLevel, bool]]:
        """Each gating level with whether its shine is collected.

        A level without a zone or shine in the world data never blocks the
        gate and is reported as done.
        """
        result = []
        for level in self.levels:
            shine_id = self.designated_shine(level)
            done = shine_id is None or self.progress.is_collected(shine_id)
            result.append((level, done))
        return result

    @property
    def done_count(self) -> int:
        return sum(1 for _, done in self.progress_by_level() if done)

    def is_open(self) -> bool:
        return all(done for _, done in self.progress_by_level())

    def walk(self, walker: GraphWalker) -> WalkResult:
        """Walk the boss route, or nothing while the gate is closed."""
        if not self.is_open():
            return WalkResult()
        return walker.walk_zone(self.destination)

    def route_tree(self, walker: GraphWalker) -> RouteNode | None:
        if not self.is_open():
            return None
        return walker.zone_tree(self.destination)
