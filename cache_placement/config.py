"""
Configuration for a placement run
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .optimizers import STRATEGIES


@dataclass
class PlacementConfig:
    strategy: str = "advanced"

    # worker pool
    workers: int = 4
    chunk_size: int = 1024

    # stop after this many insertions (None runs until nothing fits)
    max_iterations: Optional[int] = None

    show_progress: bool = True
    log_level: str = "WARNING"

    def __post_init__(self):
        for name in ("strategy", "log_level"):
            if not isinstance(getattr(self, name), str):
                raise ValueError(f"{name} must be a string, got {getattr(self, name)!r}")
        for name in ("workers", "chunk_size", "max_iterations"):
            value = getattr(self, name)
            if value is None and name == "max_iterations":
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        self.strategy = self.strategy.lower()
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"unknown strategy '{self.strategy}'. available: {list(STRATEGIES.keys())}")
        if self.workers < 1:
            raise ValueError(f"workers must be >= 1, got {self.workers}")
        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {self.chunk_size}")
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "PlacementConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(config_dict) - known
        if unknown:
            raise ValueError(f"unknown config keys: {sorted(unknown)}")
        return cls(**config_dict)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "PlacementConfig":
        with open(path, "r") as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_yaml(self, path: Union[str, Path]) -> None:
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False)

    def update(self, **overrides) -> "PlacementConfig":
        """copy with every non-None override applied."""
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return PlacementConfig.from_dict(values)


def load_config(config_path: Optional[Union[str, Path]] = None) -> PlacementConfig:
    if config_path:
        return PlacementConfig.from_yaml(config_path)
    return PlacementConfig()
