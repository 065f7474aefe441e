"""
Configuration Service

Loads rule tables from YAML files.
Allows changing race parameters and the workout catalogue without code changes.

Usage:
    config = ConfigService.get()

    # Get a single rule
    cap = ConfigService.get("plan_rules.race_params.Marathon.peak_weekly_mileage_cap")

    # Immutable race parameters
    params = get_race_params(RaceDistance.MARATHON)

    # Reload config without restart
    ConfigService.reload()
"""

import yaml
import logging
from dataclasses import dataclass
from functools import lru_cache, reduce
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional, Dict, Mapping

from trainplan.core.config import settings
from .constants import RaceDistance, QualityType, DEFAULT_QUALITY_PERCENTAGE

logger = logging.getLogger(__name__)

BUNDLED_CONFIG_DIR = Path(__file__).parent.parent / "config"


@dataclass(frozen=True)
class QualityBounds:
    """Share of weekly mileage and [min, max] miles for one quality type."""
    percentage: float
    min_miles: float
    max_miles: float


@dataclass(frozen=True)
class RaceParams:
    """Static per-race configuration. Built once, never mutated."""
    race_distance: RaceDistance
    peak_weekly_mileage_cap: int
    long_run_max: int
    long_run_floor: int           # non-negotiable
    long_run_percentage: float    # max fraction of weekly mileage
    minimum_long_run_target: int
    race_distance_miles: float
    quality: Mapping[QualityType, QualityBounds]
    long_run_growth_target: Optional[int] = None

    def quality_bounds(self, quality_type: QualityType) -> QualityBounds:
        """Bounds for a quality type, with the generic fallback for unknown types."""
        if quality_type in self.quality:
            return self.quality[quality_type]
        widest_min = min(b.min_miles for b in self.quality.values())
        widest_max = max(b.max_miles for b in self.quality.values())
        return QualityBounds(DEFAULT_QUALITY_PERCENTAGE, widest_min, widest_max)


class ConfigService:
    """
    Load and cache configuration from YAML files.
    """

    _config: Optional[Dict[str, Any]] = None

    CONFIG_FILES = (
        "plan_rules.yaml",
        "workout_library.yaml",
    )

    @classmethod
    def config_dir(cls) -> Path:
        if settings.PLAN_CONFIG_DIR:
            return Path(settings.PLAN_CONFIG_DIR)
        return BUNDLED_CONFIG_DIR

    @classmethod
    def get(cls, key: str = None, default: Any = None) -> Any:
        """
        Get configuration value.

        Args:
            key: Dot-separated key (e.g., "plan_rules.race_params.5K.long_run_max")
            default: Default value if key not found

        Returns:
            Configuration value or entire config if no key provided
        """
        if cls._config is None:
            cls._load()

        if key is None:
            return cls._config

        try:
            keys = key.split(".")
            value = reduce(lambda d, k: d[k], keys, cls._config)
            return value
        except (KeyError, TypeError):
            return default

    @classmethod
    def reload(cls):
        """Reload configuration from files."""
        cls._config = None
        get_race_params.cache_clear()
        cls._load()
        logger.info("Configuration reloaded")

    @classmethod
    def _load(cls):
        """Load all configuration files."""
        cls._config = {}
        config_dir = cls.config_dir()

        for filename in cls.CONFIG_FILES:
            filepath = config_dir / filename
            if filepath.exists():
                try:
                    with open(filepath, 'r', encoding='utf-8') as f:
                        data = yaml.safe_load(f)
                        if data:
                            # Namespace by filename (without extension)
                            namespace = filename.rsplit('.', 1)[0]
                            cls._config[namespace] = data
                            logger.debug(f"Loaded config: {filename}")
                except (OSError, yaml.YAMLError) as e:
                    logger.error(f"Error loading {filename}: {e}")
            else:
                logger.debug(f"Config file not found: {filepath}")

        # Plan rules always have a code-level fallback
        if "plan_rules" not in cls._config:
            cls._load_defaults()

    @classmethod
    def _load_defaults(cls):
        """Load default plan rules from constants."""
        from .constants import RACE_PARAMS

        cls._config["plan_rules"] = {
            "race_params": {
                race.value: params for race, params in RACE_PARAMS.items()
            }
        }
        logger.info("Using built-in plan rules")


@lru_cache(maxsize=None)
def get_race_params(race_distance: RaceDistance) -> RaceParams:
    """
    Immutable race parameters for a race distance.

    Values come from plan_rules.yaml, falling back to constants for any
    key the file leaves out.
    """
    from .constants import RACE_PARAMS

    race_distance = RaceDistance.parse(race_distance)
    raw = dict(RACE_PARAMS[race_distance])
    overrides = ConfigService.get(f"plan_rules.race_params.{race_distance.value}", {}) or {}
    raw.update(overrides)

    quality = {
        QualityType(name): QualityBounds(
            percentage=float(bounds["percentage"]),
            min_miles=float(bounds["min"]),
            max_miles=float(bounds["max"]),
        )
        for name, bounds in raw["quality"].items()
    }

    return RaceParams(
        race_distance=race_distance,
        peak_weekly_mileage_cap=int(raw["peak_weekly_mileage_cap"]),
        long_run_max=int(raw["long_run_max"]),
        long_run_floor=int(raw["long_run_floor"]),
        long_run_percentage=float(raw["long_run_percentage"]),
        minimum_long_run_target=int(raw["minimum_long_run_target"]),
        race_distance_miles=float(raw["race_distance_miles"]),
        quality=MappingProxyType(quality),
        long_run_growth_target=raw.get("long_run_growth_target"),
    )
