"""World data structures for the tracker.

This module contains the static world model: zones, their exits and
collectibles, the plaza entrances, and the composite keys used to route
exits and identify blue coins.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TypeVar

import yaml

HUB_ZONE_ID = "dolpic_base"
HUB_GROUP = "Plaza: Special & Secrets"
BOSS_ENTRANCE_ID = "enter_corona"
BOSS_ZONE_ID = "coro_ex6"
BOSS_ARENA_ZONE_ID = "coronaBoss"

KEY_SEPARATOR = "::"

_TRAILING_DIGITS = re.compile(r"[0-9]+$")
_COIN_NUMBER = re.compile(r"#coin-(\d+)$")

_K = TypeVar("_K", bound="GroupKey")


class WorldDataError(ValueError):
    """Raised when a world document cannot be interpreted."""


def zone_group(zone_id: str) -> str:
    """Return the group of a zone: its id without the trailing number.

    Numbered variants of the same area (``bianco1`` .. ``bianco8``) share
    one group, which is the namespace for exit routing and coin identity.
    """
    return _TRAILING_DIGITS.sub("", zone_id)


@dataclass(frozen=True)
class GroupKey:
    """A (group, local id) pair with structural equality.

    Subclasses never compare equal to each other, so a routing key and a
    coin key built from the same strings stay distinct.
    """

    group: str
    local_id: str

    def encode(self) -> str:
        """Encode to the ``group::id`` wire form (bare id without group)."""
        if not self.group:
            return self.local_id
        return f"{self.group}{KEY_SEPARATOR}{self.local_id}"

    @classmethod
    def decode(cls: type[_K], raw: str) -> _K:
        """Parse a wire string produced by :meth:`encode`."""
        group, sep, local_id = raw.partition(KEY_SEPARATOR)
        if not sep:
            return cls("", raw)
        return cls(group, local_id)

    def __str__(self) -> str:
        return self.encode()


@dataclass(frozen=True)
class RoutingKey(GroupKey):
    """Lookup key resolving an entrance or exit to a destination zone."""

    @classmethod
    def for_entrance(cls, entrance_id: str) -> RoutingKey:
        """Entrances route by their own id, not by a zone group."""
        return cls("", entrance_id)

    @classmethod
    def for_exit(cls, zone_id: str, exit_id: str) -> RoutingKey:
        return cls(zone_group(zone_id), exit_id)


@dataclass(frozen=True)
class CoinKey(GroupKey):
    """Blue coin identity, scoped to the zone group it appears in."""

    @classmethod
    def for_zone(cls, zone_id: str, coin_id: str) -> CoinKey:
        return cls(zone_group(zone_id), coin_id)


@dataclass(frozen=True)
class ShineDefinition:
    """A shine sprite available in a zone."""

    id: str
    name: str
    num_id: int = 0  # Numeric id reported by the game hook, 0 if unknown

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ShineDefinition:
        return cls(
            id=str(data["id"]),
            name=data.get("name", data["id"]),
            num_id=int(data.get("num_id", 0)),
        )


@dataclass(frozen=True)
class Exit:
    """A loading zone leaving a zone; resolved through an assignment."""

    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Exit:
        return cls(id=str(data["id"]), name=data.get("name", data["id"]))


@dataclass(frozen=True)
class Zone:
    """A level or area the player can be warped to.

    Zones are identified by their `id` field.
    """

    id: str
    name: str
    shines: tuple[ShineDefinition, ...] = ()
    exits: tuple[Exit, ...] = ()
    blue_coin_ids: tuple[str, ...] = ()

    @property
    def group(self) -> str:
        """Zone group used for exit routing and coin dedup."""
        return zone_group(self.id)

    def exit_key(self, exit_: Exit) -> RoutingKey:
        """Routing key of one of this zone's exits."""
        return RoutingKey.for_exit(self.id, exit_.id)

    def coin_key(self, coin_id: str) -> CoinKey:
        return CoinKey.for_zone(self.id, coin_id)

    @classmethod
    def from_dict(cls, zone_id: str, data: dict[str, Any]) -> Zone:
        """Create a Zone from its JSON record.

        The world document keys zones by id; the key is injected here so the
        record does not need to repeat it.
        """
        return cls(
            id=zone_id,
            name=data.get("name", zone_id),
            shines=tuple(
                ShineDefinition.from_dict(s)
                for s in data.get("shines_available") or []
            ),
            exits=tuple(Exit.from_dict(e) for e in data.get("exits") or []),
            blue_coin_ids=tuple(str(c) for c in data.get("blue_coin_ids") or []),
        )


@dataclass(frozen=True)
class Entrance:
    """A top-level entry point from the plaza hub.

    A warp entrance routes to a zone through its assignment. A non-warp
    entrance is a static plaza shine: its id is the shine id.
    """

    id: str
    name: str
    group_name: str
    image: str = ""
    is_warp: bool = True

    @property
    def routing_key(self) -> RoutingKey:
        return RoutingKey.for_entrance(self.id)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Entrance:
        return cls(
            id=str(data["id"]),
            name=data.get("name", data["id"]),
            group_name=data.get("group_name", ""),
            image=data.get("image", ""),
            is_warp=data.get("is_warp", True) is not False,
        )


@dataclass(frozen=True)
class Unlock:
    """A movement skill, nozzle or item shown in the unlock bar."""

    id: str
    name: str
    icon: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Unlock:
        return cls(
            id=str(data["id"]),
            name=data.get("name", data["id"]),
            icon=data.get("icon", ""),
        )


@dataclass(frozen=True)
class BlueCoinDefinition:
    """Guide metadata for a blue coin id."""

    id: str
    title: str = ""
    episode: tuple[int, ...] = ()
    episode_string: str = ""
    guide_link: str = ""

    @property
    def number(self) -> int | None:
        """Coin number parsed from the guide link anchor, if any."""
        match = _COIN_NUMBER.search(self.guide_link)
        if match:
            return int(match.group(1))
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BlueCoinDefinition:
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            episode=tuple(data.get("episode") or []),
            episode_string=data.get("episodeString", ""),
            guide_link=data.get("mariopartylegacylink", ""),
        )


# Worlds reachable from the plaza, each with eight episode entrances.
PLAZA_WORLDS: list[tuple[str, str, str]] = [
    ("bianco", "Bianco Hills", "bianco_entry.png"),
    ("ricco", "Ricco Harbor", "ricco_entry.png"),
    ("gelato", "Gelato Beach", "gelato_entry.png"),
    ("pinna", "Pinna Park", "pinna_entry.png"),
    ("sirena", "Sirena Beach", "sirena_entry.png"),
    ("noki", "Noki Bay", "noki_entry.png"),
    ("pianta", "Pianta Village", "pianta_entry.png"),
]
EPISODES_PER_WORLD = 8


def default_entrances() -> list[Entrance]:
    """Build the standard plaza entrance list.

    The boss entrance comes first, in the special plaza group, followed by
    ``enter_<world>_ep<n>`` warps for every world and episode.
    """
    entrances = [
        Entrance(
            id=BOSS_ENTRANCE_ID,
            name="Corona Mountain",
            group_name=HUB_GROUP,
            image="corona.png",
            is_warp=True,
        )
    ]
    for world_id, world_name, image in PLAZA_WORLDS:
        for episode in range(1, EPISODES_PER_WORLD + 1):
            entrances.append(
                Entrance(
                    id=f"enter_{world_id}_ep{episode}",
                    name=f"Episode {episode}",
                    group_name=world_name,
                    image=image,
                    is_warp=True,
                )
            )
    return entrances


@dataclass
class WorldData:
    """Root container for the static world loaded once per session."""

    zones: dict[str, Zone] = field(default_factory=dict)
    entrances: list[Entrance] = field(default_factory=list)
    unlocks: list[Unlock] = field(default_factory=list)
    blue_coins: dict[str, BlueCoinDefinition] = field(default_factory=dict)

    def get_zone(self, zone_id: str | None) -> Zone | None:
        """Get a zone by id, or None if not found."""
        if not zone_id:
            return None
        return self.zones.get(zone_id)

    def get_entrance(self, entrance_id: str) -> Entrance | None:
        for entrance in self.entrances:
            if entrance.id == entrance_id:
                return entrance
        return None

    def entrance_groups(self) -> list[str]:
        """Group names in first-appearance order."""
        groups: list[str] = []
        for entrance in self.entrances:
            if entrance.group_name not in groups:
                groups.append(entrance.group_name)
        return groups

    def entrances_in_group(self, group_name: str) -> list[Entrance]:
        return [e for e in self.entrances if e.group_name == group_name]

    def static_entrances(self) -> list[Entrance]:
        """Entrances that are plaza shines rather than warps."""
        return [e for e in self.entrances if not e.is_warp]

    def coin_info(self, coin_id: str) -> BlueCoinDefinition | None:
        return self.blue_coins.get(coin_id)

    def zone_name(self, zone_id: str) -> str:
        zone = self.zones.get(zone_id)
        return zone.name if zone else "Unknown"

    def zone_options(self) -> list[Zone]:
        """Zones a user may assign, sorted by display name.

        The boss zones are reached through the fixed boss route only.
        """
        return sorted(
            (
                z
                for z in self.zones.values()
                if z.id not in (BOSS_ZONE_ID, BOSS_ARENA_ZONE_ID)
            ),
            key=lambda z: z.name.lower(),
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WorldData:
        """Create WorldData from a parsed world document.

        Raises:
            WorldDataError: If the document or one of its records is malformed.
        """
        if not isinstance(data, dict):
            raise WorldDataError("World document must be a mapping")

        raw_zones = data.get("zones") or {}
        if not isinstance(raw_zones, dict):
            raise WorldDataError("'zones' must map zone ids to zone records")

        try:
            zones = {
                str(zone_id): Zone.from_dict(str(zone_id), record or {})
                for zone_id, record in raw_zones.items()
            }
            raw_entrances = data.get("plaza_entrances")
            if raw_entrances is None:
                entrances = default_entrances()
            else:
                entrances = [Entrance.from_dict(e) for e in raw_entrances]
            unlocks = [Unlock.from_dict(u) for u in data.get("unlocks") or []]
            coins = [
                BlueCoinDefinition.from_dict(c) for c in data.get("blue_coins") or []
            ]
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise WorldDataError(f"Malformed world record: {e!r}") from e

        return cls(
            zones=zones,
            entrances=entrances,
            unlocks=unlocks,
            blue_coins={c.id: c for c in coins},
        )

    @classmethod
    def from_file(cls, path: Path) -> WorldData:
        """Load a world document from a JSON or YAML file."""
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in (".yaml", ".yml"):
                try:
                    data = yaml.safe_load(f)
                except yaml.YAMLError as e:
                    raise WorldDataError(f"Invalid YAML in {path}: {e}") from e
            else:
                try:
                    data = json.load(f)
                except json.JSONDecodeError as e:
                    raise WorldDataError(f"Invalid JSON in {path}: {e}") from e
        return cls.from_dict(data)


def load_world(path: Path) -> WorldData:
    """Load the world model from a JSON or YAML document.

    Args:
        path: Path to the world document

    Returns:
        WorldData with zones, entrances, unlocks and coin metadata

    Raises:
        FileNotFoundError: If the file doesn't exist
        WorldDataError: If the document is malformed
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"World file not found: {path}")
    return WorldData.from_file(path)
