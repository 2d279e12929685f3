"""Save file format for tracker progress.

A save is a JSON document holding the assignment map, shine and coin
progress, unlocks and collapsed UI rows. Loading validates the whole
document before any store is touched.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from smstracker.stores import AssignmentStore, ProgressStore
from smstracker.world import CoinKey

logger = logging.getLogger(__name__)


class InvalidSaveError(ValueError):
    """Raised when a save document cannot be parsed or validated."""


@dataclass
class Snapshot:
    """Serializable copy of the assignment and progress stores."""

    unlocks: list[str] = field(default_factory=list)
    assignments: dict[str, str] = field(default_factory=dict)
    collected_shines: list[str] = field(default_factory=list)
    excluded_shines: list[str] = field(default_factory=list)
    collected_coins: list[str] = field(default_factory=list)
    collapsed: list[str] = field(default_factory=list)
    timestamp: str = ""

    @classmethod
    def capture(
        cls, assignments: AssignmentStore, progress: ProgressStore
    ) -> Snapshot:
        """Copy the current store contents. Lists are sorted for stable output."""
        return cls(
            unlocks=sorted(progress.unlocks),
            assignments=assignments.to_dict(),
            collected_shines=sorted(progress.collected_shines),
            excluded_shines=sorted(progress.excluded_shines),
            collected_coins=sorted(k.encode() for k in progress.collected_coins),
            collapsed=sorted(progress.collapsed),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    def apply(self, assignments: AssignmentStore, progress: ProgressStore) -> None:
        """Replace store contents with this snapshot.

        Fixed routes are re-applied over whatever the snapshot holds.
        """
        assignments.replace(AssignmentStore.decode_routes(self.assignments))
        progress.replace(
            collected=self.collected_shines,
            excluded=self.excluded_shines,
            coins=[CoinKey.decode(raw) for raw in self.collected_coins],
            unlocks=self.unlocks,
            collapsed=self.collapsed,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "unlocks": list(self.unlocks),
            "globalAssignments": dict(self.assignments),
            "collectedShines": list(self.collected_shines),
            "excludedShines": list(self.excluded_shines),
            "collectedBlueCoins": list(self.collected_coins),
            "collapsedElements": list(self.collapsed),
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Snapshot:
        """Create a Snapshot from a parsed save document.

        Missing fields default to empty.

        Raises:
            InvalidSaveError: If the document or a field has the wrong shape.
        """
        if not isinstance(data, dict):
            raise InvalidSaveError("Save document must be a JSON object")

        assignments = data.get("globalAssignments") or {}
        if not isinstance(assignments, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in assignments.items()
        ):
            raise InvalidSaveError("'globalAssignments' must map strings to strings")

        timestamp = data.get("timestamp") or ""
        if not isinstance(timestamp, str):
            raise InvalidSaveError("'timestamp' must be a string")

        return cls(
            unlocks=_string_list(data, "unlocks"),
            assignments=dict(assignments),
            collected_shines=_string_list(data, "collectedShines"),
            excluded_shines=_string_list(data, "excludedShines"),
            collected_coins=_string_list(data, "collectedBlueCoins"),
            collapsed=_string_list(data, "collapsedElements"),
            timestamp=timestamp,
        )


def _string_list(data: dict[str, Any], name: str) -> list[str]:
    value = data.get(name) or []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise InvalidSaveError(f"'{name}' must be a list of strings")
    return list(value)


def dumps(snapshot: Snapshot) -> str:
    return json.dumps(snapshot.to_dict(), indent=2)


def loads(text: str) -> Snapshot:
    """Parse a save document.

    Raises:
        InvalidSaveError: If the text is not valid JSON or not a save.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidSaveError(f"Invalid JSON: {e}") from e
    return Snapshot.from_dict(data)


def default_save_name() -> str:
    """File name for a new save, stamped with the current epoch milliseconds."""
    return f"sms-tracker-save-{int(time.time() * 1000)}.json"


def save_snapshot(path: Path, snapshot: Snapshot) -> Path:
    """Write a snapshot to a JSON file, creating parent directories.

    Args:
        path: Target file, or a directory to receive a default-named file

    Returns:
        Path of the written file.
    """
    path = Path(path)
    if path.is_dir():
        path = path / default_save_name()
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        f.write(dumps(snapshot))
    logger.info("Saved progress to %s", path)
    return path


def load_snapshot(path: Path) -> Snapshot:
    """Read a snapshot from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        InvalidSaveError: If the file is not a valid save
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Save file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise InvalidSaveError(f"Save file is not text: {path}") from e
    snapshot = loads(text)
    logger.debug("Loaded save %s (timestamp %s)", path, snapshot.timestamp or "?")
    return snapshot
