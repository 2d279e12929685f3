"""Configuration parsing for the tracker."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# Use tomllib (Python 3.11+) with fallback to tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError as e:
        raise ImportError(
            "tomli is required for Python < 3.11. Install with: pip install tomli"
        ) from e


@dataclass
class TrackerConfig:
    """Auto-tracker configuration."""

    interval_seconds: float = 5.0
    auto_track_default: bool = True

    def __post_init__(self) -> None:
        """Validate tracker configuration."""
        if self.interval_seconds <= 0:
            raise ValueError(
                f"interval_seconds must be positive, got {self.interval_seconds}"
            )


@dataclass
class PathsConfig:
    """File paths configuration."""

    world_file: str = "./data/world.json"
    save_dir: str = "./saves"
    memory_file: str | None = None  # JSON memory-state document written by the hook


@dataclass
class Config:
    """Main configuration container."""

    tracker: TrackerConfig = field(default_factory=TrackerConfig)
    paths: PathsConfig = field(default_factory=PathsConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Config:
        """Create Config from a dictionary (e.g., parsed TOML)."""
        tracker_section = data.get("tracker", {})
        paths_section = data.get("paths", {})

        return cls(
            tracker=TrackerConfig(
                interval_seconds=tracker_section.get("interval_seconds", 5.0),
                auto_track_default=tracker_section.get("auto_track_default", True),
            ),
            paths=PathsConfig(
                world_file=paths_section.get("world_file", "./data/world.json"),
                save_dir=paths_section.get("save_dir", "./saves"),
                memory_file=paths_section.get("memory_file"),
            ),
        )

    @classmethod
    def from_toml(cls, path: str | Path) -> Config:
        """Load configuration from a TOML file."""
        path = Path(path)
        with path.open("rb") as f:
            data = tomllib.load(f)
        return cls.from_dict(data)


def load_config(path: str | Path) -> Config:
    """Load configuration from a TOML file.

    This is a convenience function that wraps Config.from_toml().

    Args:
        path: Path to the TOML configuration file.

    Returns:
        Parsed Config object.
    """
    return Config.from_toml(path)
