"""Configuration Management for devicefit

This module provides centralized configuration for the scheduling core using
Pydantic settings. Scoring weights are immutable once loaded and validated.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from .errors import raise_configuration_error

# Maximum score a node may hold after normalization
MAX_NODE_SCORE = 100


class ZeroCountPolicy(str, Enum):
    """How the filter treats a request for zero devices."""

    MATCH_FIRST_DEVICE = "match_first_device"
    REJECT = "reject"


class ScoringConfig(BaseSettings):
    """Immutable scoring weights - cannot be modified at runtime."""

    count_weight: int = Field(default=1, description="Weight of the free device count ratio")
    memory_weight: int = Field(default=2, description="Weight of the memory-per-unit ratio")
    clock_weight: int = Field(default=1, description="Weight of the clock-per-unit ratio")
    score_scale: int = Field(
        default=1, description="Multiplier applied to the exact combined score"
    )
    output_max: int = Field(
        default=MAX_NODE_SCORE, description="Upper bound of normalized node scores"
    )

    @field_validator("count_weight", "memory_weight", "clock_weight")
    @classmethod
    def validate_weight(cls, v):
        if v <= 0:
            raise ValueError("scoring weights must be positive")
        return v

    @field_validator("score_scale")
    @classmethod
    def validate_score_scale(cls, v):
        if v <= 0:
            raise ValueError("score_scale must be positive")
        return v

    @field_validator("output_max")
    @classmethod
    def validate_output_max(cls, v):
        if v <= 0:
            raise ValueError("output_max must be positive")
        return v

    model_config = {"frozen": True, "env_prefix": "DEVICEFIT_"}


@dataclass
class FilterConfig:
    """Configuration for the fitness filter."""

    zero_count_policy: ZeroCountPolicy = ZeroCountPolicy.MATCH_FIRST_DEVICE

    def __post_init__(self):
        """Validate filter configuration."""
        try:
            self.zero_count_policy = ZeroCountPolicy(self.zero_count_policy)
        except ValueError:
            raise ValueError(f"Invalid zero_count_policy: {self.zero_count_policy}")


@dataclass
class CycleConfig:
    """Configuration for running a scheduling cycle."""

    max_parallelism: int = 1

    def __post_init__(self):
        """Validate cycle configuration."""
        if self.max_parallelism < 1:
            raise ValueError("max_parallelism must be at least 1")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    log_level: str = "INFO"
    log_format: str = "console"

    def __post_init__(self):
        """Validate logging configuration."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level not in valid_levels:
            raise ValueError(f"Invalid log level: {self.log_level}")

        valid_formats = ["console", "json"]
        if self.log_format not in valid_formats:
            raise ValueError(f"Invalid log format: {self.log_format}")


@dataclass
class DeviceFitConfig:
    """Main configuration class for devicefit."""

    # Immutable scoring policy
    scoring: ScoringConfig = field(default_factory=ScoringConfig)

    # Mutable operational configurations
    filter: FilterConfig = field(default_factory=FilterConfig)
    cycle: CycleConfig = field(default_factory=CycleConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "DeviceFitConfig":
        """Load configuration from environment variables."""

        if env_file:
            cls._load_env_file(env_file)

        scoring_values = {
            "count_weight": cls._get_strict_int_env("DEVICEFIT_COUNT_WEIGHT", "count_weight", 1),
            "memory_weight": cls._get_strict_int_env("DEVICEFIT_MEMORY_WEIGHT", "memory_weight", 2),
            "clock_weight": cls._get_strict_int_env("DEVICEFIT_CLOCK_WEIGHT", "clock_weight", 1),
            "score_scale": cls._get_strict_int_env("DEVICEFIT_SCORE_SCALE", "score_scale", 1),
            "output_max": cls._get_strict_int_env(
                "DEVICEFIT_OUTPUT_MAX", "output_max", MAX_NODE_SCORE
            ),
        }
        try:
            scoring = ScoringConfig(**scoring_values)
        except ValidationError as e:
            failed = str(e.errors()[0]["loc"][0])
            raise_configuration_error(failed, scoring_values.get(failed), "positive integer")

        policy = os.getenv("DEVICEFIT_ZERO_COUNT_POLICY", ZeroCountPolicy.MATCH_FIRST_DEVICE.value)
        try:
            filter_config = FilterConfig(zero_count_policy=policy.lower().strip())
        except ValueError:
            raise_configuration_error("zero_count_policy", policy, "match_first_device or reject")

        parallelism = cls._get_int_env("DEVICEFIT_MAX_PARALLELISM", 1)
        try:
            cycle = CycleConfig(max_parallelism=parallelism)
        except ValueError:
            raise_configuration_error("max_parallelism", parallelism, "integer >= 1")

        logging = LoggingConfig(
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("LOG_FORMAT", "console").lower(),
        )

        return cls(scoring=scoring, filter=filter_config, cycle=cycle, logging=logging)

    @staticmethod
    def _load_env_file(env_file: str):
        """Load environment variables from file."""
        env_path = Path(env_file)
        if not env_path.exists():
            return

        with open(env_path, "r") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    os.environ[key.strip()] = value.strip()

    @staticmethod
    def _get_int_env(key: str, default: int) -> int:
        """Get integer environment variable."""
        try:
            return int(os.getenv(key, str(default)))
        except ValueError:
            return default

    @staticmethod
    def _get_strict_int_env(key: str, field_name: str, default: int) -> int:
        """Get integer environment variable, rejecting values that do not parse."""
        raw = os.getenv(key)
        if raw is None:
            return default
        try:
            return int(raw.strip())
        except ValueError:
            raise_configuration_error(field_name, raw, "integer")

    def validate(self) -> List[str]:
        """Validate the entire configuration and return any errors."""
        errors = []

        try:
            # Re-create scoring config to trigger validation
            ScoringConfig(
                count_weight=self.scoring.count_weight,
                memory_weight=self.scoring.memory_weight,
                clock_weight=self.scoring.clock_weight,
                score_scale=self.scoring.score_scale,
                output_max=self.scoring.output_max,
            )
        except ValueError as e:
            errors.append(f"Scoring configuration error: {e}")

        if self.cycle.max_parallelism > 64:
            errors.append("max_parallelism > 64 may cause resource exhaustion")

        return errors

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return {
            "scoring": {
                "count_weight": self.scoring.count_weight,
                "memory_weight": self.scoring.memory_weight,
                "clock_weight": self.scoring.clock_weight,
                "score_scale": self.scoring.score_scale,
                "output_max": self.scoring.output_max,
            },
            "filter": {
                "zero_count_policy": self.filter.zero_count_policy.value,
            },
            "cycle": {
                "max_parallelism": self.cycle.max_parallelism,
            },
            "logging": {
                "log_level": self.logging.log_level,
                "log_format": self.logging.log_format,
            },
        }

    def __str__(self) -> str:
        """String representation of configuration."""
        return (
            f"DeviceFitConfig(weights={self.scoring.count_weight}/"
            f"{self.scoring.memory_weight}/{self.scoring.clock_weight}, "
            f"zero_count_policy={self.filter.zero_count_policy.value})"
        )


# Global configuration instance
_global_config: Optional[DeviceFitConfig] = None


def get_config() -> DeviceFitConfig:
    """Get the global configuration instance."""
    global _global_config
    if _global_config is None:
        _global_config = DeviceFitConfig.from_env()
    return _global_config


def set_config(config: DeviceFitConfig):
    """Set the global configuration instance."""
    global _global_config

    errors = config.validate()
    if errors:
        raise ValueError(f"Configuration validation failed: {errors}")

    _global_config = config


def reset_config():
    """Reset the global configuration to default."""
    global _global_config
    _global_config = None
