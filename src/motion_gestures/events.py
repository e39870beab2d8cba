"""Pose samples and the gesture events produced from them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from motion_gestures.spatial import axis_label


@dataclass
class PoseSample:
    """One timestamped reading from a tracked device.

    Position is in meters; orientation is a unit quaternion ``(w, x, y, z)``.
    The orientation is not renormalized — keeping it unit-length is the
    producer's job.
    """
    timestamp: float  # seconds, monotonic
    position: np.ndarray  # shape (3,)
    orientation: np.ndarray  # shape (4,)

    def __post_init__(self):
        self.timestamp = float(self.timestamp)
        self.position = np.asarray(self.position, dtype=np.float64).reshape(3)
        self.orientation = np.asarray(self.orientation, dtype=np.float64).reshape(4)

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp,
            "position": self.position.tolist(),
            "orientation": self.orientation.tolist(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> PoseSample:
        return cls(
            timestamp=data["timestamp"],
            position=data["position"],
            orientation=data["orientation"],
        )


class RotationPhase(Enum):
    IDLE = "idle"
    ROTATING = "rotating"


class RotationEventKind(Enum):
    STARTED = "started"
    CONTINUING = "continuing"
    ENDED = "ended"


@dataclass
class RotationEvent:
    """Base for the three twist events."""
    timestamp: float
    hand_id: int

    kind = None  # overridden per variant


@dataclass
class RotationStarted(RotationEvent):
    """A twist crossed the start thresholds over the history window."""
    axis: np.ndarray = field(default_factory=lambda: np.zeros(3))
    total_angle_deg: float = 0.0

    kind = RotationEventKind.STARTED

    @property
    def axis_label(self) -> str:
        return axis_label(self.axis)


@dataclass
class RotationContinuing(RotationEvent):
    """A twist is still in progress.

    ``frame_angle_deg`` is the rotation since the previous sample, signed
    relative to ``axis``.
    """
    axis: np.ndarray = field(default_factory=lambda: np.zeros(3))
    frame_angle_deg: float = 0.0

    kind = RotationEventKind.CONTINUING

    @property
    def axis_label(self) -> str:
        return axis_label(self.axis)


@dataclass
class RotationEnded(RotationEvent):
    """The twist's angular velocity dropped below the continue threshold."""
    total_angle_deg: float = 0.0

    kind = RotationEventKind.ENDED


@dataclass
class ThrustEvent:
    """Fired once per push or pull along the device's forward direction."""
    displacement_m: float  # signed; positive = along forward
    velocity_m_per_sec: float
    timestamp: float
    hand_id: int = 0

    @property
    def direction(self) -> str:
        return "push" if self.displacement_m > 0 else "pull"


GestureEvent = RotationEvent | ThrustEvent
