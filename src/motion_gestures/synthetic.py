"""Deterministic synthetic pose streams.

Builds sample sequences for tests, demos and benchmarks without a headset.
Each step continues from the pose where the previous one ended.

Usage:
    samples = (
        SyntheticStream(rate_hz=60)
        .hold(0.2)
        .twist(axis=(0, 1, 0), degrees=90, duration=1.0)
        .hold(0.5)
        .samples
    )
"""

from __future__ import annotations

import numpy as np

from motion_gestures.events import PoseSample
from motion_gestures.spatial import (
    IDENTITY,
    quat_from_axis_angle,
    quat_multiply,
    quat_rotate,
)


class SyntheticStream:
    """Accumulates a pose stream at a fixed sample rate."""

    def __init__(
        self,
        rate_hz: float = 60.0,
        start_time: float = 0.0,
        position=(0.0, 0.0, 0.0),
        orientation=IDENTITY,
    ):
        self.rate_hz = rate_hz
        self._samples = [PoseSample(start_time, position, orientation)]

    @property
    def samples(self) -> list[PoseSample]:
        return list(self._samples)

    @property
    def last(self) -> PoseSample:
        return self._samples[-1]

    def _steps(self, duration: float) -> int:
        return max(1, int(round(duration * self.rate_hz)))

    def hold(self, duration: float) -> SyntheticStream:
        """Keep the current pose still."""
        base = self.last
        for i in range(1, self._steps(duration) + 1):
            self._samples.append(PoseSample(
                base.timestamp + i / self.rate_hz, base.position, base.orientation,
            ))
        return self

    def twist(self, axis=(0.0, 1.0, 0.0), degrees: float = 90.0, duration: float = 1.0) -> SyntheticStream:
        """Rotate steadily about a world-space axis."""
        base = self.last
        n = self._steps(duration)
        for i in range(1, n + 1):
            delta = quat_from_axis_angle(axis, degrees * i / n)
            self._samples.append(PoseSample(
                base.timestamp + i / self.rate_hz,
                base.position,
                quat_multiply(delta, base.orientation),
            ))
        return self

    def thrust(self, distance_m: float = 0.1, duration: float = 0.2, forward=(0.0, 0.0, 1.0)) -> SyntheticStream:
        """Translate steadily along the device's forward direction.

        Negative distances pull back toward the user.
        """
        base = self.last
        world_forward = quat_rotate(base.orientation, np.asarray(forward, dtype=np.float64))
        n = self._steps(duration)
        for i in range(1, n + 1):
            self._samples.append(PoseSample(
                base.timestamp + i / self.rate_hz,
                base.position + world_forward * (distance_m * i / n),
                base.orientation,
            ))
        return self

    def move(self, offset, duration: float = 0.2) -> SyntheticStream:
        """Translate steadily by a world-space offset."""
        base = self.last
        offset = np.asarray(offset, dtype=np.float64)
        n = self._steps(duration)
        for i in range(1, n + 1):
            self._samples.append(PoseSample(
                base.timestamp + i / self.rate_hz,
                base.position + offset * (i / n),
                base.orientation,
            ))
        return self


def add_jitter(
    samples: list[PoseSample],
    position_sigma: float = 0.0005,
    angle_sigma_deg: float = 0.05,
    seed: int = 0,
) -> list[PoseSample]:
    """Return copies of ``samples`` with Gaussian position and orientation noise."""
    rng = np.random.default_rng(seed)
    noisy = []
    for s in samples:
        axis = rng.standard_normal(3)
        wobble = quat_from_axis_angle(axis, float(rng.normal(0.0, angle_sigma_deg)))
        noisy.append(PoseSample(
            s.timestamp,
            s.position + rng.normal(0.0, position_sigma, 3),
            quat_multiply(wobble, s.orientation),
        ))
    return noisy
