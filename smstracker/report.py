"""Human-readable progress report.

Renders the same information as the tracker table: overall counts, boss
gate progress, and every plaza route as an indented zone tree with its
collectibles, exits and loop markers.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from smstracker.aggregate import CategoryStats, Completion, CompletionState
from smstracker.stores import ShineStatus
from smstracker.tracker import Tracker
from smstracker.walker import RouteNode
from smstracker.world import Entrance, Zone

SHINE_MARKS = {
    ShineStatus.UNCOLLECTED: "[ ]",
    ShineStatus.COLLECTED: "[x]",
    ShineStatus.EXCLUDED: "[-]",
}
UNKNOWN_COIN_ORDER = 999


def format_stats(stats: CategoryStats) -> str:
    """Format one category; empty categories show "-" rather than 0/0."""
    if stats.state is CompletionState.NOT_APPLICABLE:
        return "-"
    mark = " ✓" if stats.is_done else ""
    return f"{stats.found_count}/{stats.total_count}{mark}"


def format_completion(completion: Completion) -> str:
    return (
        f"shines {format_stats(completion.shines)}  "
        f"coins {format_stats(completion.coins)}"
    )


def _zone_lines(tracker: Tracker, zone: Zone, prefix: str) -> list[str]:
    lines: list[str] = []
    progress = tracker.progress
    for shine in zone.shines:
        mark = SHINE_MARKS[progress.shine_status(shine.id)]
        lines.append(f"{prefix}  {mark} {shine.name}")

    if zone.blue_coin_ids:
        coins = []
        for coin_id in zone.blue_coin_ids:
            info = tracker.world.coin_info(coin_id)
            number = info.number if info else None
            order = number if number is not None else UNKNOWN_COIN_ORDER
            coins.append((order, number, coin_id))
        coins.sort(key=lambda c: c[0])
        labels = []
        for _, number, coin_id in coins:
            label = str(number) if number is not None else "?"
            if progress.is_coin_collected(zone.coin_key(coin_id)):
                label = f"*{label}"
            labels.append(label)
        lines.append(f"{prefix}  coins: {' '.join(labels)}")
    return lines


def _tree_lines(tracker: Tracker, node: RouteNode) -> list[str]:
    indent = "│   " * node.depth
    lines = [f"{indent}↳ {node.zone.name}"]
    lines.extend(_zone_lines(tracker, node.zone, indent))
    for branch in node.exits:
        target = tracker.world.zone_name(branch.target) if branch.target else "--"
        lines.append(f"{indent}└── Exit: {branch.exit.name} -> {target}")
        if branch.is_loop:
            lines.append(f"{indent}    ⤴ Already in chain: {target}")
        elif branch.child is not None:
            lines.extend(_tree_lines(tracker, branch.child))
    return lines


def _entrance_lines(tracker: Tracker, entrance: Entrance) -> list[str]:
    summary = tracker.summary
    gate = tracker.gate

    if entrance.id == gate.entrance_id:
        if not summary.gate_open:
            return [
                f"{entrance.name}: LOCKED "
                f"(collect all {len(gate.levels)} gate shines)"
            ]
        lines = [f"{entrance.name} -> {tracker.world.zone_name(gate.destination)} (Boss)"]
        tree = gate.route_tree(tracker.walker)
        if tree is not None:
            lines.extend(_tree_lines(tracker, tree))
        return lines

    target = tracker.assignments.get(entrance.routing_key)
    if not target:
        return [f"{entrance.name} -> --"]
    completion = summary.routes.get(entrance.id, Completion())
    lines = [
        f"{entrance.name} -> {tracker.world.zone_name(target)}"
        f"    {format_completion(completion)}"
    ]
    tree = tracker.walker.route_tree(entrance.routing_key)
    if tree is not None:
        lines.extend(_tree_lines(tracker, tree))
    return lines


def _gate_line(tracker: Tracker) -> str:
    parts = [
        f"[{'x' if done else ' '}] {level.name}"
        for level, done in tracker.summary.gate_progress
    ]
    state = "UNLOCKED" if tracker.summary.gate_open else "locked"
    return f"Boss access: {' '.join(parts)}  ({state})"


def format_report(tracker: Tracker) -> str:
    """Render the full progress report as text."""
    summary = tracker.summary
    world = tracker.world
    lines: list[str] = []

    lines.append("=" * 60)
    lines.append("SMS TRACKER PROGRESS")
    lines.append(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    lines.append("=" * 60)
    lines.append(f"Shines: {format_stats(summary.world.shines)}")
    lines.append(f"Blue coins: {format_stats(summary.world.coins)}")
    lines.append(_gate_line(tracker))

    for group_name in world.entrance_groups():
        lines.append("")
        lines.append("=" * 60)
        lines.append(f"{group_name}    {format_completion(summary.groups[group_name])}")
        lines.append("=" * 60)

        if group_name == tracker.aggregator.hub_group:
            hub_zone = world.get_zone(tracker.aggregator.hub_zone_id)
            lines.append(f"Plaza hub    {format_completion(summary.hub)}")
            for entrance in world.static_entrances():
                mark = SHINE_MARKS[tracker.progress.shine_status(entrance.id)]
                lines.append(f"  {mark} {entrance.name}")
            if hub_zone is not None:
                lines.extend(_zone_lines(tracker, hub_zone, ""))

        for entrance in world.entrances_in_group(group_name):
            if not entrance.is_warp:
                continue
            lines.extend(_entrance_lines(tracker, entrance))

    lines.append("")
    return "\n".join(lines)


def export_report(tracker: Tracker, output_path: Path) -> None:
    """Write the progress report to a file.

    Args:
        tracker: Session to report on
        output_path: Path to write the report
    """
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(format_report(tracker), encoding="utf-8")
