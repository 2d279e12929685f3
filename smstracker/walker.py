"""Depth-first walk over the assignment graph.

A walk starts from a routing key, resolves it through the assignment store,
collects the zone's shines and blue coins, and recurses into every exit.
The ancestor path travels with each call, so a zone already on the current
path ends that branch with an empty contribution. Sibling branches do not
share a visited set: two routes reaching the same zone is the normal dedup
case, not a loop.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from smstracker.stores import AssignmentStore, ProgressStore
from smstracker.world import CoinKey, Exit, RoutingKey, WorldData, Zone


@dataclass(frozen=True)
class LoopMarker:
    """An exit whose target is already on the current path."""

    key: RoutingKey
    zone_id: str


@dataclass
class WalkResult:
    """Collectibles reachable from a starting point.

    The sets carry identity for counting; `zones` and `loops` keep first-visit
    order for presentation only.
    """

    shines_total: set[str] = field(default_factory=set)
    shines_found: set[str] = field(default_factory=set)
    shines_excluded: set[str] = field(default_factory=set)
    coins_total: set[CoinKey] = field(default_factory=set)
    coins_found: set[CoinKey] = field(default_factory=set)
    zones: list[str] = field(default_factory=list)
    loops: list[LoopMarker] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.zones and not self.shines_total and not self.coins_total

    def merge(self, other: WalkResult) -> WalkResult:
        """Union another result into this one and return self."""
        self.shines_total |= other.shines_total
        self.shines_found |= other.shines_found
        self.shines_excluded |= other.shines_excluded
        self.coins_total |= other.coins_total
        self.coins_found |= other.coins_found
        for zone_id in other.zones:
            if zone_id not in self.zones:
                self.zones.append(zone_id)
        for loop in other.loops:
            if loop not in self.loops:
                self.loops.append(loop)
        return self

    def __or__(self, other: WalkResult) -> WalkResult:
        result = WalkResult()
        result.merge(self)
        return result.merge(other)


@dataclass
class ExitBranch:
    """One exit of a zone in a route tree."""

    exit: Exit
    key: RoutingKey
    target: str | None  # Assigned zone id, None when unassigned
    child: RouteNode | None = None
    is_loop: bool = False


@dataclass
class RouteNode:
    """A zone placed in a route tree, with its exits in listing order."""

    zone: Zone
    depth: int
    exits: list[ExitBranch] = field(default_factory=list)


class GraphWalker:
    """Resolve routes through the world using the current assignments."""

    def __init__(
        self,
        world: WorldData,
        assignments: AssignmentStore,
        progress: ProgressStore,
    ) -> None:
        self.world = world
        self.assignments = assignments
        self.progress = progress

    def walk(
        self, start_key: RoutingKey, visited: tuple[str, ...] = ()
    ) -> WalkResult:
        """Walk everything reachable through a routing key.

        Args:
            start_key: Entrance or exit key to resolve
            visited: Zone ids already on the current path (ancestors)

        Returns:
            WalkResult of the subgraph. Empty when the key is unassigned,
            points at an unknown zone, or closes a loop with an ancestor.
        """
        target = self.assignments.get(start_key)
        if not target or target in visited:
            return WalkResult()
        return self.walk_zone(target, visited)

    def walk_zone(self, zone_id: str, visited: tuple[str, ...] = ()) -> WalkResult:
        """Walk from a known zone id, following its exits."""
        zone = self.world.get_zone(zone_id)
        if zone is None or zone_id in visited:
            return WalkResult()

        result = self.zone_contents(zone_id)
        path = visited + (zone_id,)
        for exit_ in zone.exits:
            key = zone.exit_key(exit_)
            target = self.assignments.get(key)
            if target and target in path:
                result.loops.append(LoopMarker(key, target))
                continue
            result.merge(self.walk(key, path))
        return result

    def zone_contents(self, zone_id: str) -> WalkResult:
        """Collectibles of a single zone, without following exits."""
        result = WalkResult()
        zone = self.world.get_zone(zone_id)
        if zone is None:
            return result

        result.zones.append(zone.id)
        for shine in zone.shines:
            result.shines_total.add(shine.id)
            if self.progress.is_collected(shine.id):
                result.shines_found.add(shine.id)
            elif self.progress.is_excluded(shine.id):
                result.shines_excluded.add(shine.id)
        for coin_id in zone.blue_coin_ids:
            coin_key = zone.coin_key(coin_id)
            result.coins_total.add(coin_key)
            if self.progress.is_coin_collected(coin_key):
                result.coins_found.add(coin_key)
        return result

    def route_tree(
        self, start_key: RoutingKey, visited: tuple[str, ...] = ()
    ) -> RouteNode | None:
        """Presentation tree for a route, or None when nothing is reachable."""
        target = self.assignments.get(start_key)
        if not target or target in visited:
            return None
        return self.zone_tree(target, visited)

    def zone_tree(
        self, zone_id: str, visited: tuple[str, ...] = (), depth: int = 1
    ) -> RouteNode | None:
        """Presentation tree rooted at a known zone id.

        Exits closing a loop are kept with ``is_loop`` set so the caller can
        show an "already in chain" marker instead of expanding them.
        """
        zone = self.world.get_zone(zone_id)
        if zone is None or zone_id in visited:
            return None

        node = RouteNode(zone=zone, depth=depth)
        path = visited + (zone_id,)
        for exit_ in zone.exits:
            key = zone.exit_key(exit_)
            target = self.assignments.get(key)
            branch = ExitBranch(exit=exit_, key=key, target=target)
            if target and target in path:
                branch.is_loop = True
            elif target:
                branch.child = self.zone_tree(target, path, depth + 1)
            node.exits.append(branch)
        return node
