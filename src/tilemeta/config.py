from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

logger = logging.getLogger(__name__)

ERROR = "error"
WARN = "warn"
_POLICIES = (ERROR, WARN)


@dataclass(frozen=True)
class LoaderConfig:
    """Policies applied while loading a tileset descriptor.

    unknown_property_types: "error" raises UnsupportedPropertyType,
        "warn" logs a warning and drops the property.
    warn_out_of_range_frames: log a warning when an animation frame
        references a tile id >= tile_count (the frame is kept either way).
    """

    unknown_property_types: str = ERROR
    warn_out_of_range_frames: bool = True

    def __post_init__(self) -> None:
        if self.unknown_property_types not in _POLICIES:
            raise ValueError(
                f"unknown_property_types must be one of {_POLICIES}, got {self.unknown_property_types!r}"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoaderConfig":
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown loader config keys: {', '.join(unknown)}")
        policy = data.get("unknown_property_types", ERROR)
        if not isinstance(policy, str):
            raise ValueError(f"unknown_property_types must be a string, got {policy!r}")
        warn_frames = data.get("warn_out_of_range_frames", True)
        if not isinstance(warn_frames, bool):
            raise ValueError(f"warn_out_of_range_frames must be true or false, got {warn_frames!r}")
        return cls(unknown_property_types=policy.lower(), warn_out_of_range_frames=warn_frames)

    @staticmethod
    def _read_mapping(path: Path) -> Dict[str, Any]:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Loader config {path} must be a mapping")
        return data

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "LoaderConfig":
        data = cls._read_mapping(Path(path))
        logger.debug("Loaded loader config from %s", path)
        return cls.from_dict(data)

    @classmethod
    def load(cls, user_path: Optional[Path] = None) -> "LoaderConfig":
        """Load packaged defaults, overlaid with an optional user YAML file."""
        text = resources.files("tilemeta.resources").joinpath("default_config.yaml").read_text(encoding="utf-8")
        data = yaml.safe_load(text) or {}
        if user_path is not None:
            user_path = Path(user_path)
            if user_path.exists():
                data.update(cls._read_mapping(user_path))
                logger.info("Loaded user loader config from %s", user_path)
            else:
                logger.warning("Loader config file not found: %s", user_path)
        return cls.from_dict(data)

    def to_yaml(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(dataclasses.asdict(self), f, sort_keys=False)
        logger.info("Saved loader config to %s", path)


DEFAULT_CONFIG = LoaderConfig()

__all__ = ["LoaderConfig", "DEFAULT_CONFIG", "ERROR", "WARN"]
