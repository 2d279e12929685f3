"""Tests for world data loading and composite keys."""

import json

import pytest

from smstracker.world import (
    BOSS_ENTRANCE_ID,
    BOSS_ZONE_ID,
    HUB_GROUP,
    BlueCoinDefinition,
    CoinKey,
    RoutingKey,
    WorldData,
    WorldDataError,
    Zone,
    default_entrances,
    load_world,
    zone_group,
)


def make_world_dict() -> dict:
    """Minimal world document with two zones and explicit entrances."""
    return {
        "zones": {
            "bianco1": {
                "name": "Bianco Hills 1",
                "shines_available": [
                    {"id": "bianco_ep1", "name": "Road to the Big Windmill"}
                ],
                "exits": [{"id": "windmill_door", "name": "Windmill Door"}],
                "blue_coin_ids": ["bianco_windmill_top"],
            },
            "ricco6": {"name": "Ricco Harbor 6"},
        },
        "plaza_entrances": [
            {
                "id": "enter_bianco_ep1",
                "name": "Episode 1",
                "group_name": "Bianco Hills",
            },
            {
                "id": "plaza_box",
                "name": "Shine Gate Box",
                "group_name": HUB_GROUP,
                "is_warp": False,
            },
        ],
        "unlocks": [{"id": "hover", "name": "Hover Nozzle"}],
        "blue_coins": [
            {
                "id": "bianco_windmill_top",
                "title": "Top of the windmill",
                "episode": [1, 6],
                "episodeString": "1, 6",
                "mariopartylegacylink": "https://example.org/bianco#coin-3",
            }
        ],
    }


class TestZoneGroup:
    """Tests for zone grouping."""

    def test_strips_trailing_digits(self):
        """Numbered variants share a group."""
        assert zone_group("bianco1") == "bianco"
        assert zone_group("bianco12") == "bianco"

    def test_keeps_inner_digits(self):
        """Only the trailing number is removed."""
        assert zone_group("coro_ex6") == "coro_ex"
        assert zone_group("pinna2Parco") == "pinna2Parco"

    def test_no_digits(self):
        assert zone_group("dolpic_base") == "dolpic_base"


class TestKeys:
    """Tests for routing and coin keys."""

    def test_exit_keys_shared_within_group(self):
        """Exits with the same id in sibling zones resolve to the same key."""
        assert RoutingKey.for_exit("bianco1", "door") == RoutingKey.for_exit(
            "bianco6", "door"
        )

    def test_exit_keys_differ_across_groups(self):
        assert RoutingKey.for_exit("bianco1", "door") != RoutingKey.for_exit(
            "ricco1", "door"
        )

    def test_coin_keys_scoped_by_group(self):
        """The same coin id in two groups gives two distinct coins."""
        assert CoinKey.for_zone("bianco1", "c1") != CoinKey.for_zone("ricco1", "c1")
        assert CoinKey.for_zone("bianco1", "c1") == CoinKey.for_zone("bianco6", "c1")

    def test_routing_and_coin_keys_never_equal(self):
        assert RoutingKey("bianco", "x") != CoinKey("bianco", "x")

    def test_entrance_key_encodes_bare(self):
        """Entrance keys have no group and encode to the entrance id."""
        key = RoutingKey.for_entrance("enter_bianco_ep1")
        assert key.encode() == "enter_bianco_ep1"
        assert RoutingKey.decode("enter_bianco_ep1") == key

    def test_encode_decode(self):
        key = RoutingKey.for_exit("bianco3", "windmill_door")
        assert key.encode() == "bianco::windmill_door"
        assert RoutingKey.decode(key.encode()) == key

    def test_decode_splits_on_first_separator(self):
        """Separator characters in the local id survive decoding."""
        key = CoinKey.decode("bianco::odd::id")
        assert key.group == "bianco"
        assert key.local_id == "odd::id"


class TestZone:
    """Tests for Zone records."""

    def test_from_dict(self):
        zone = Zone.from_dict("bianco1", make_world_dict()["zones"]["bianco1"])
        assert zone.id == "bianco1"
        assert zone.group == "bianco"
        assert [s.id for s in zone.shines] == ["bianco_ep1"]
        assert zone.exits[0].name == "Windmill Door"
        assert zone.blue_coin_ids == ("bianco_windmill_top",)

    def test_from_dict_missing_lists(self):
        """Zones without collectibles or exits load as empty."""
        zone = Zone.from_dict("ricco6", {"name": "Ricco Harbor 6"})
        assert zone.shines == ()
        assert zone.exits == ()
        assert zone.blue_coin_ids == ()

    def test_exit_key(self):
        zone = Zone.from_dict("bianco1", make_world_dict()["zones"]["bianco1"])
        assert zone.exit_key(zone.exits[0]) == RoutingKey("bianco", "windmill_door")


class TestBlueCoinDefinition:
    """Tests for blue coin metadata."""

    def test_number_from_link(self):
        coin = BlueCoinDefinition.from_dict(make_world_dict()["blue_coins"][0])
        assert coin.number == 3
        assert coin.episode == (1, 6)
        assert coin.episode_string == "1, 6"

    def test_number_missing(self):
        coin = BlueCoinDefinition(id="x", guide_link="https://example.org/page")
        assert coin.number is None


class TestWorldData:
    """Tests for WorldData."""

    def test_from_dict(self):
        world = WorldData.from_dict(make_world_dict())
        assert set(world.zones) == {"bianco1", "ricco6"}
        assert world.get_entrance("plaza_box").is_warp is False
        assert [u.id for u in world.unlocks] == ["hover"]
        assert world.coin_info("bianco_windmill_top").number == 3

    def test_default_entrances_when_missing(self):
        """Worlds without an entrance list get the standard plaza layout."""
        data = make_world_dict()
        del data["plaza_entrances"]
        world = WorldData.from_dict(data)
        assert world.entrances == default_entrances()

    def test_default_entrances_layout(self):
        entrances = default_entrances()
        assert entrances[0].id == BOSS_ENTRANCE_ID
        assert entrances[0].group_name == HUB_GROUP
        assert len(entrances) == 1 + 7 * 8
        assert entrances[1].id == "enter_bianco_ep1"
        assert entrances[-1].id == "enter_pianta_ep8"

    def test_entrance_groups_in_order(self):
        world = WorldData.from_dict(make_world_dict())
        assert world.entrance_groups() == ["Bianco Hills", HUB_GROUP]

    def test_static_entrances(self):
        world = WorldData.from_dict(make_world_dict())
        assert [e.id for e in world.static_entrances()] == ["plaza_box"]

    def test_zone_name_unknown(self):
        world = WorldData.from_dict(make_world_dict())
        assert world.zone_name("bianco1") == "Bianco Hills 1"
        assert world.zone_name("nowhere") == "Unknown"

    def test_zone_options_hide_boss_zones(self):
        data = make_world_dict()
        data["zones"][BOSS_ZONE_ID] = {"name": "Corona Mountain"}
        world = WorldData.from_dict(data)
        assert [z.id for z in world.zone_options()] == ["bianco1", "ricco6"]

    def test_malformed_record(self):
        """A record missing its id raises WorldDataError."""
        data = make_world_dict()
        data["unlocks"] = [{"name": "No id"}]
        with pytest.raises(WorldDataError):
            WorldData.from_dict(data)

    def test_not_a_mapping(self):
        with pytest.raises(WorldDataError):
            WorldData.from_dict(["zones"])


class TestLoadWorld:
    """Tests for loading world files."""

    def test_load_json(self, tmp_path):
        path = tmp_path / "world.json"
        path.write_text(json.dumps(make_world_dict()))
        world = load_world(path)
        assert "bianco1" in world.zones

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "world.yaml"
        path.write_text(
            """
zones:
  bianco1:
    name: Bianco Hills 1
    shines_available:
      - id: bianco_ep1
        name: Road to the Big Windmill
plaza_entrances:
  - id: enter_bianco_ep1
    name: Episode 1
    group_name: Bianco Hills
"""
        )
        world = load_world(path)
        assert world.zones["bianco1"].shines[0].id == "bianco_ep1"
        assert len(world.entrances) == 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_world(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "world.json"
        path.write_text("{not json")
        with pytest.raises(WorldDataError):
            load_world(path)
