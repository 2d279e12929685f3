"""World data validation.

Distinguishes errors (data that breaks identity rules the aggregator relies
on) from warnings (data the walker tolerates but that is probably a typo).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from smstracker.gate import DEFAULT_GATE_LEVELS, GateLevel
from smstracker.stores import AssignmentStore
from smstracker.world import WorldData


@dataclass
class ValidationResult:
    """Result of world validation.

    Attributes:
        is_valid: True if the world passes all required checks (no errors).
        errors: List of blocking issues.
        warnings: List of informational issues that don't block loading.
    """

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_world(
    world: WorldData,
    assignments: AssignmentStore | None = None,
    gate_levels: tuple[GateLevel, ...] = DEFAULT_GATE_LEVELS,
) -> ValidationResult:
    """Validate world data, and optionally assignments against it.

    Checks:
    - Shine ids are unique across zones and static plaza shines
    - Exit ids are unique within each zone
    - Entrance ids are unique
    - Gating level zones exist and have a shine (warning)
    - Blue coin ids have guide metadata (warning)
    - Assignments target known zones (warning)

    Args:
        world: The world to validate.
        assignments: Optional assignments to check for dangling targets.
        gate_levels: Levels whose first shine opens the boss gate.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    _check_shine_ids(world, errors)
    _check_exit_ids(world, errors)
    _check_entrance_ids(world, errors)
    _check_gate_levels(world, gate_levels, warnings)
    _check_coin_metadata(world, warnings)
    if assignments is not None:
        _check_assignments(world, assignments, warnings)

    return ValidationResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _check_shine_ids(world: WorldData, errors: list[str]) -> None:
    """Each shine id must belong to exactly one place in the world."""
    owners: dict[str, str] = {}
    for zone in world.zones.values():
        for shine in zone.shines:
            if shine.id in owners:
                errors.append(
                    f"Shine '{shine.id}' in zone '{zone.id}' "
                    f"already defined in {owners[shine.id]}"
                )
            else:
                owners[shine.id] = f"zone '{zone.id}'"
    for entrance in world.static_entrances():
        if entrance.id in owners:
            errors.append(
                f"Plaza shine '{entrance.id}' already defined in {owners[entrance.id]}"
            )
        else:
            owners[entrance.id] = "the plaza"


def _check_exit_ids(world: WorldData, errors: list[str]) -> None:
    for zone in world.zones.values():
        seen: set[str] = set()
        for exit_ in zone.exits:
            if exit_.id in seen:
                errors.append(f"Zone '{zone.id}': duplicate exit '{exit_.id}'")
            seen.add(exit_.id)


def _check_entrance_ids(world: WorldData, errors: list[str]) -> None:
    seen: set[str] = set()
    for entrance in world.entrances:
        if entrance.id in seen:
            errors.append(f"Duplicate entrance '{entrance.id}'")
        seen.add(entrance.id)


def _check_gate_levels(
    world: WorldData, gate_levels: tuple[GateLevel, ...], warnings: list[str]
) -> None:
    for level in gate_levels:
        zone = world.get_zone(level.zone_id)
        if zone is None:
            warnings.append(
                f"Gate level {level.name}: zone '{level.zone_id}' not found "
                f"(will not block the gate)"
            )
        elif not zone.shines:
            warnings.append(
                f"Gate level {level.name}: zone '{level.zone_id}' has no shine "
                f"(will not block the gate)"
            )


def _check_coin_metadata(world: WorldData, warnings: list[str]) -> None:
    if not world.blue_coins:
        return
    missing = sorted(
        {
            coin_id
            for zone in world.zones.values()
            for coin_id in zone.blue_coin_ids
            if coin_id not in world.blue_coins
        }
    )
    for coin_id in missing:
        warnings.append(f"Blue coin '{coin_id}' has no guide metadata")


def _check_assignments(
    world: WorldData, assignments: AssignmentStore, warnings: list[str]
) -> None:
    for key, zone_id in assignments.items():
        if zone_id not in world.zones:
            warnings.append(f"Assignment '{key}' targets unknown zone '{zone_id}'")
