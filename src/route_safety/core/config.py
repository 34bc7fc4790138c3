"""Configuration management for route safety analysis."""

from dataclasses import dataclass, fields, asdict
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from .errors import ConfigError


@dataclass(frozen=True)
class SafetyConfig:
    """Parameters of the safety scoring algorithm.

    Values are checked on construction, so an instance is always usable as is.
    """

    search_radius_m: float = 100.0
    recency_weight: bool = True
    recency_days: int = 60
    confidence_threshold: int = 2
    time_window_hours: float = 2.0
    dangerous_threshold: float = 5.0
    top_segments: int = 3
    max_workers: int = 4

    def __post_init__(self):
        if not isinstance(self.recency_weight, bool):
            raise ConfigError(
                f"recency_weight must be true or false, got {self.recency_weight!r}"
            )
        self._require_positive("search_radius_m", self.search_radius_m)
        self._require_positive("recency_days", self.recency_days, integer=True)
        self._require_positive(
            "confidence_threshold", self.confidence_threshold, integer=True
        )
        self._require_positive("time_window_hours", self.time_window_hours)
        self._require_positive("top_segments", self.top_segments, integer=True)
        self._require_positive("max_workers", self.max_workers, integer=True)
        self._require_positive("dangerous_threshold", self.dangerous_threshold)
        if self.dangerous_threshold > 10:
            raise ConfigError(
                f"dangerous_threshold must be at most 10, got {self.dangerous_threshold}"
            )

    @staticmethod
    def _require_positive(name: str, value: Any, integer: bool = False):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"{name} must be a number, got {value!r}")
        if integer and not isinstance(value, int):
            raise ConfigError(f"{name} must be an integer, got {value!r}")
        if value <= 0:
            raise ConfigError(f"{name} must be greater than 0, got {value}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SafetyConfig":
        """
        Build a config from a mapping of overrides.

        Args:
            data: Field names mapped to values; omitted fields keep defaults

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**dict(data))

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "SafetyConfig":
        """
        Load configuration from a YAML file.

        The file may hold the settings under an ``analysis`` section or as
        top-level keys.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            SafetyConfig instance

        Raises:
            FileNotFoundError: If the file does not exist
            ConfigError: If the file is not valid YAML or holds invalid values
        """
        config_path = Path(yaml_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(config_path) as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in config file: {e}")

        if config is None:
            return cls()
        if not isinstance(config, dict):
            raise ConfigError(f"Config file must contain a mapping: {yaml_path}")

        if "analysis" in config:
            config = config["analysis"] or {}
            if not isinstance(config, dict):
                raise ConfigError(f"analysis section must be a mapping: {yaml_path}")
        return cls.from_mapping(config)

    def replace(self, **overrides) -> "SafetyConfig":
        """Return a validated copy with some fields changed."""
        merged = self.to_dict()
        merged.update(overrides)
        return self.from_mapping(merged)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
