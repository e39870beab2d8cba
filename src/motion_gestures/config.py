"""Detector configuration — validated, immutable threshold records.

Configurations are built once, validated eagerly, and replaced wholesale
between ticks. Invalid values raise ``ConfigError`` at construction so a
bad threshold can never surface mid-stream.

Load from YAML:
    config = GestureConfig.from_yaml("gestures.yml")
"""

from __future__ import annotations

import math
import numbers
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


class ConfigError(ValueError):
    """Raised when a detector configuration is rejected."""


def _require_number(name: str, value):
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ConfigError(f"{name} must be a number, got {value!r}")


def _require_positive(name: str, value: float):
    _require_number(name, value)
    if not value > 0:
        raise ConfigError(f"{name} must be > 0, got {value!r}")


def _require_non_negative(name: str, value: float):
    _require_number(name, value)
    if not value >= 0:
        raise ConfigError(f"{name} must be >= 0, got {value!r}")


def _check_keys(cls, data: dict, section: str):
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(f"Unknown {section} option(s): {', '.join(sorted(unknown))}")


@dataclass(frozen=True)
class RotationConfig:
    """Thresholds for the wrist-twist detector."""

    start_angle_threshold_deg: float = 15.0
    start_velocity_threshold_deg_per_sec: float = 30.0
    continue_velocity_threshold_deg_per_sec: float = 15.0
    axis_smoothing_factor: float = 0.3  # 0 = follow each frame, 1 = frozen axis
    end_delay_seconds: float = 0.0
    axis_update_min_angle_deg: float = 0.0
    report_local_axis: bool = False

    def __post_init__(self):
        _require_positive("start_angle_threshold_deg", self.start_angle_threshold_deg)
        _require_positive(
            "start_velocity_threshold_deg_per_sec",
            self.start_velocity_threshold_deg_per_sec,
        )
        _require_positive(
            "continue_velocity_threshold_deg_per_sec",
            self.continue_velocity_threshold_deg_per_sec,
        )
        if self.continue_velocity_threshold_deg_per_sec > self.start_velocity_threshold_deg_per_sec:
            raise ConfigError(
                "continue_velocity_threshold_deg_per_sec "
                f"({self.continue_velocity_threshold_deg_per_sec}) must not exceed "
                f"start_velocity_threshold_deg_per_sec ({self.start_velocity_threshold_deg_per_sec})"
            )
        _require_number("axis_smoothing_factor", self.axis_smoothing_factor)
        if not 0.0 <= self.axis_smoothing_factor <= 1.0:
            raise ConfigError(
                f"axis_smoothing_factor must be in [0, 1], got {self.axis_smoothing_factor!r}"
            )
        _require_non_negative("end_delay_seconds", self.end_delay_seconds)
        _require_non_negative("axis_update_min_angle_deg", self.axis_update_min_angle_deg)
        if not isinstance(self.report_local_axis, bool):
            raise ConfigError(
                f"report_local_axis must be true or false, got {self.report_local_axis!r}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> RotationConfig:
        _check_keys(cls, data, "rotation")
        return cls(**data)


@dataclass(frozen=True)
class ThrustConfig:
    """Thresholds for the push/pull detector."""

    distance_threshold_m: float = 0.1
    velocity_threshold_m_per_sec: float = 0.3
    reference_forward_axis: tuple[float, float, float] = (0.0, 0.0, 1.0)

    def __post_init__(self):
        _require_positive("distance_threshold_m", self.distance_threshold_m)
        _require_positive("velocity_threshold_m_per_sec", self.velocity_threshold_m_per_sec)

        try:
            axis = tuple(float(c) for c in self.reference_forward_axis)
        except (TypeError, ValueError):
            raise ConfigError(
                f"reference_forward_axis must be 3 numbers, got {self.reference_forward_axis!r}"
            ) from None
        if len(axis) != 3:
            raise ConfigError(f"reference_forward_axis must have 3 components, got {len(axis)}")
        length = math.sqrt(sum(c * c for c in axis))
        if abs(length - 1.0) > 1e-3:
            raise ConfigError(
                f"reference_forward_axis must be a unit vector, got length {length:.4f}"
            )
        object.__setattr__(self, "reference_forward_axis", axis)

    @property
    def rearm_distance_m(self) -> float:
        """Displacement below which a fired detector re-arms."""
        return self.distance_threshold_m / 2.0

    @classmethod
    def from_dict(cls, data: dict) -> ThrustConfig:
        _check_keys(cls, data, "thrust")
        data = dict(data)
        if "reference_forward_axis" in data:
            data["reference_forward_axis"] = tuple(data["reference_forward_axis"])
        return cls(**data)


@dataclass(frozen=True)
class GestureConfig:
    """Complete configuration for one tracked device."""

    history_window_size: int = 10
    rotation: RotationConfig = field(default_factory=RotationConfig)
    thrust: ThrustConfig = field(default_factory=ThrustConfig)

    def __post_init__(self):
        if isinstance(self.history_window_size, bool) or not isinstance(self.history_window_size, int):
            raise ConfigError(
                f"history_window_size must be an integer, got {self.history_window_size!r}"
            )
        if self.history_window_size < 2:
            raise ConfigError(
                f"history_window_size must be >= 2, got {self.history_window_size}"
            )

        if isinstance(self.rotation, dict):
            object.__setattr__(self, "rotation", RotationConfig.from_dict(self.rotation))
        elif not isinstance(self.rotation, RotationConfig):
            raise ConfigError(f"rotation must be a RotationConfig, got {self.rotation!r}")
        if isinstance(self.thrust, dict):
            object.__setattr__(self, "thrust", ThrustConfig.from_dict(self.thrust))
        elif not isinstance(self.thrust, ThrustConfig):
            raise ConfigError(f"thrust must be a ThrustConfig, got {self.thrust!r}")

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["thrust"]["reference_forward_axis"] = list(self.thrust.reference_forward_axis)
        return data

    @classmethod
    def from_dict(cls, data: dict | None) -> GestureConfig:
        data = data or {}
        _check_keys(cls, data, "top-level")
        try:
            return cls(
                history_window_size=data.get("history_window_size", 10),
                rotation=RotationConfig.from_dict(data.get("rotation") or {}),
                thrust=ThrustConfig.from_dict(data.get("thrust") or {}),
            )
        except TypeError as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> GestureConfig:
        """Load a configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)

        if data is not None and not isinstance(data, dict):
            raise ConfigError(f"{path}: expected a mapping at the top level")
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        """Save this configuration to YAML."""
        with open(path, "w") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)
