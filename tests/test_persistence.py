"""Tests for save files."""

import json

import pytest

from smstracker.persistence import (
    InvalidSaveError,
    Snapshot,
    default_save_name,
    dumps,
    load_snapshot,
    loads,
    save_snapshot,
)
from smstracker.stores import AssignmentStore, ProgressStore, ShineStatus
from smstracker.tracker import Tracker
from smstracker.world import CoinKey, RoutingKey, ShineDefinition, WorldData, Zone


def make_snapshot() -> Snapshot:
    return Snapshot(
        unlocks=["hover"],
        assignments={"enter_bianco_ep1": "bianco1", "bianco::door": "ricco1"},
        collected_shines=["bianco_ep1"],
        excluded_shines=["ricco_ep6"],
        collected_coins=["bianco::windmill_top"],
        collapsed=["row-bianco"],
        timestamp="2026-01-01T00:00:00+00:00",
    )


class TestSnapshot:
    """Tests for Snapshot conversion."""

    def test_to_dict_keys(self):
        data = make_snapshot().to_dict()
        assert set(data) == {
            "unlocks",
            "globalAssignments",
            "collectedShines",
            "excludedShines",
            "collectedBlueCoins",
            "collapsedElements",
            "timestamp",
        }

    def test_dict_round_trip(self):
        snapshot = make_snapshot()
        assert Snapshot.from_dict(snapshot.to_dict()) == snapshot

    def test_missing_fields_default_empty(self):
        snapshot = Snapshot.from_dict({"collectedShines": ["a"]})
        assert snapshot.collected_shines == ["a"]
        assert snapshot.assignments == {}
        assert snapshot.excluded_shines == []

    def test_capture_and_apply(self):
        assignments = AssignmentStore()
        progress = ProgressStore()
        assignments.set(RoutingKey.for_exit("bianco1", "door"), "ricco1")
        progress.set_shine_status("a", ShineStatus.COLLECTED)
        progress.set_coin(CoinKey.for_zone("bianco1", "c1"), True)
        snapshot = Snapshot.capture(assignments, progress)
        assert snapshot.assignments == {"bianco::door": "ricco1"}
        assert snapshot.collected_coins == ["bianco::c1"]

        other_assignments = AssignmentStore()
        other_progress = ProgressStore()
        snapshot.apply(other_assignments, other_progress)
        assert other_assignments.items() == assignments.items()
        assert other_progress.collected_coins == progress.collected_coins
        assert other_progress.is_collected("a")

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"globalAssignments": ["a"]},
            {"globalAssignments": {"a": 1}},
            {"collectedShines": "abc"},
            {"collectedBlueCoins": [1, 2]},
            {"timestamp": 12},
        ],
    )
    def test_invalid_shapes(self, data):
        with pytest.raises(InvalidSaveError):
            Snapshot.from_dict(data)


class TestSaveFiles:
    """Tests for reading and writing save files."""

    def test_file_round_trip(self, tmp_path):
        path = save_snapshot(tmp_path / "save.json", make_snapshot())
        assert path == tmp_path / "save.json"
        assert load_snapshot(path) == make_snapshot()

    def test_save_into_directory(self, tmp_path):
        path = save_snapshot(tmp_path, make_snapshot())
        assert path.parent == tmp_path
        assert path.name.startswith("sms-tracker-save-")
        assert json.loads(path.read_text())["unlocks"] == ["hover"]

    def test_default_save_name(self):
        name = default_save_name()
        assert name.startswith("sms-tracker-save-")
        assert name.endswith(".json")

    def test_loads_invalid_json(self):
        with pytest.raises(InvalidSaveError):
            loads("{broken")

    def test_dumps_is_json(self):
        assert json.loads(dumps(make_snapshot()))["collectedShines"] == ["bianco_ep1"]

    def test_load_missing(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_snapshot(tmp_path / "missing.json")

    def test_invalid_save_leaves_state_untouched(self, tmp_path):
        """A rejected save never partially applies."""
        world = WorldData(
            zones={
                "bianco1": Zone(
                    id="bianco1",
                    name="Bianco Hills 1",
                    shines=(ShineDefinition(id="b1", name="b1"),),
                )
            }
        )
        tracker = Tracker.from_world(world)
        tracker.assign(RoutingKey.for_entrance("enter_bianco_ep1"), "bianco1")
        tracker.cycle_shine("b1")
        before = tracker.snapshot()

        path = tmp_path / "bad.json"
        path.write_text(
            json.dumps({"globalAssignments": {}, "collectedShines": [1]})
        )
        with pytest.raises(InvalidSaveError):
            tracker.load_snapshot(load_snapshot(path))

        after = tracker.snapshot()
        assert after.assignments == before.assignments
        assert after.collected_shines == before.collected_shines
