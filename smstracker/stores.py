"""Mutable session state: exit assignments and collection progress.

Both stores are plain objects handed to the walker and aggregator. All
mutation goes through their methods; neither knows about graph topology
beyond the keys it stores.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from enum import Enum

from smstracker.world import CoinKey, RoutingKey


class AssignmentStore:
    """Routing key -> destination zone id.

    Assignments are not validated against the world: a key pointing at an
    unknown zone simply walks to nothing.
    """

    def __init__(self, fixed: Mapping[RoutingKey, str] | None = None) -> None:
        self._routes: dict[RoutingKey, str] = {}
        self._fixed: dict[RoutingKey, str] = dict(fixed or {})
        self.ensure_defaults()

    def get(self, key: RoutingKey) -> str | None:
        """Destination zone id for a key, or None when unassigned."""
        return self._routes.get(key) or None

    def set(self, key: RoutingKey, zone_id: str | None) -> None:
        """Assign a key, silently replacing any previous target.

        An empty zone id clears the assignment.
        """
        if zone_id:
            self._routes[key] = zone_id
        else:
            self._routes.pop(key, None)

    def clear(self, key: RoutingKey) -> None:
        self._routes.pop(key, None)

    def is_fixed(self, key: RoutingKey) -> bool:
        return key in self._fixed

    def fixed_target(self, key: RoutingKey) -> str | None:
        return self._fixed.get(key)

    def ensure_defaults(self) -> None:
        """Install every fixed route, overriding any imported value."""
        for key, zone_id in self._fixed.items():
            self._routes[key] = zone_id

    def replace(self, routes: Mapping[RoutingKey, str]) -> None:
        """Replace all assignments, then restore the fixed routes."""
        self._routes = {k: v for k, v in routes.items() if v}
        self.ensure_defaults()

    def items(self) -> list[tuple[RoutingKey, str]]:
        return list(self._routes.items())

    def to_dict(self) -> dict[str, str]:
        """Assignments keyed by their encoded wire strings."""
        return {key.encode(): zone_id for key, zone_id in self._routes.items()}

    @staticmethod
    def decode_routes(data: Mapping[str, str]) -> dict[RoutingKey, str]:
        return {
            RoutingKey.decode(raw): zone_id
            for raw, zone_id in data.items()
        }

    def __contains__(self, key: object) -> bool:
        return key in self._routes

    def __iter__(self) -> Iterator[RoutingKey]:
        return iter(self._routes)

    def __len__(self) -> int:
        return len(self._routes)


class ShineStatus(Enum):
    """Per-player status of a shine."""

    UNCOLLECTED = "uncollected"
    COLLECTED = "collected"
    EXCLUDED = "excluded"  # Deliberately out of completion scope (missable)

    def next(self) -> ShineStatus:
        """Successor in the click cycle."""
        return _SHINE_CYCLE[self]


_SHINE_CYCLE = {
    ShineStatus.UNCOLLECTED: ShineStatus.COLLECTED,
    ShineStatus.COLLECTED: ShineStatus.EXCLUDED,
    ShineStatus.EXCLUDED: ShineStatus.UNCOLLECTED,
}


class ProgressStore:
    """Collected/excluded shines, collected coins, unlocks and UI state.

    Every status is keyed by a global identifier, so all places showing the
    same shine or coin read the same value.
    """

    def __init__(self) -> None:
        self._collected: set[str] = set()
        self._excluded: set[str] = set()
        self._coins: set[CoinKey] = set()
        self.unlocks: set[str] = set()
        self.collapsed: set[str] = set()

    # ---------- Shines ----------

    def shine_status(self, shine_id: str) -> ShineStatus:
        if shine_id in self._excluded:
            return ShineStatus.EXCLUDED
        if shine_id in self._collected:
            return ShineStatus.COLLECTED
        return ShineStatus.UNCOLLECTED

    def set_shine_status(self, shine_id: str, status: ShineStatus) -> None:
        self._collected.discard(shine_id)
        self._excluded.discard(shine_id)
        if status is ShineStatus.COLLECTED:
            self._collected.add(shine_id)
        elif status is ShineStatus.EXCLUDED:
            self._excluded.add(shine_id)

    def cycle_shine(self, shine_id: str) -> ShineStatus:
        """Advance a shine one step in the click cycle and return the result."""
        status = self.shine_status(shine_id).next()
        self.set_shine_status(shine_id, status)
        return status

    def is_collected(self, shine_id: str) -> bool:
        return shine_id in self._collected

    def is_excluded(self, shine_id: str) -> bool:
        return shine_id in self._excluded

    @property
    def collected_shines(self) -> frozenset[str]:
        return frozenset(self._collected)

    @property
    def excluded_shines(self) -> frozenset[str]:
        return frozenset(self._excluded)

    # ---------- Blue coins ----------

    def is_coin_collected(self, key: CoinKey) -> bool:
        return key in self._coins

    def set_coin(self, key: CoinKey, collected: bool) -> None:
        if collected:
            self._coins.add(key)
        else:
            self._coins.discard(key)

    def toggle_coin(self, key: CoinKey) -> bool:
        """Flip a coin's status and return the new value."""
        collected = key not in self._coins
        self.set_coin(key, collected)
        return collected

    @property
    def collected_coins(self) -> frozenset[CoinKey]:
        return frozenset(self._coins)

    # ---------- Unlocks ----------

    def has_unlock(self, unlock_id: str) -> bool:
        return unlock_id in self.unlocks

    def set_unlock(self, unlock_id: str, unlocked: bool) -> None:
        if unlocked:
            self.unlocks.add(unlock_id)
        else:
            self.unlocks.discard(unlock_id)

    def toggle_unlock(self, unlock_id: str) -> bool:
        unlocked = unlock_id not in self.unlocks
        self.set_unlock(unlock_id, unlocked)
        return unlocked

    def merge_unlocks(self, snapshot: Mapping[str, bool]) -> bool:
        """Merge an external unlock-name -> state map.

        External names are matched case-insensitively against unlock ids,
        which are lower-case.

        Returns:
            True if any unlock changed.
        """
        changed = False
        for name, unlocked in snapshot.items():
            unlock_id = name.lower()
            if bool(unlocked) != (unlock_id in self.unlocks):
                self.set_unlock(unlock_id, bool(unlocked))
                changed = True
        return changed

    # ---------- Bulk ----------

    def replace(
        self,
        collected: Iterable[str] = (),
        excluded: Iterable[str] = (),
        coins: Iterable[CoinKey] = (),
        unlocks: Iterable[str] = (),
        collapsed: Iterable[str] = (),
    ) -> None:
        """Replace the whole store contents. Excluded wins over collected."""
        self._excluded = set(excluded)
        self._collected = set(collected) - self._excluded
        self._coins = set(coins)
        self.unlocks = set(unlocks)
        self.collapsed = set(collapsed)
