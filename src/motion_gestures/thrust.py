"""Push/pull detection along the device's forward direction.

Windowed displacement is projected onto the forward axis of the current
orientation. A thrust fires when that distance and the instantaneous frame
velocity both cross their thresholds. After firing, the detector disarms and
re-baselines on the firing sample; it re-arms once the projected displacement
falls back below half the distance threshold.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from motion_gestures.config import ThrustConfig
from motion_gestures.events import PoseSample, ThrustEvent
from motion_gestures.history import PoseHistoryBuffer
from motion_gestures.spatial import quat_rotate

logger = logging.getLogger("motion_gestures.thrust")


class ThrustGestureDetector:
    """One-shot, debounced thrust detector for a single tracked device."""

    def __init__(
        self,
        config: Optional[ThrustConfig] = None,
        history: Optional[PoseHistoryBuffer] = None,
        hand_id: int = 0,
    ):
        self._config = config or ThrustConfig()
        self.history = history if history is not None else PoseHistoryBuffer(10)
        self.hand_id = hand_id

        self._armed = True
        self._reference: Optional[PoseSample] = None

    @property
    def config(self) -> ThrustConfig:
        return self._config

    @config.setter
    def config(self, value: ThrustConfig):
        self._config = value

    @property
    def armed(self) -> bool:
        return self._armed

    @property
    def reference_sample(self) -> Optional[PoseSample]:
        """Window origin: the newer of the oldest buffered sample and the last fire."""
        oldest = self.history.oldest()
        if self._reference is None:
            return oldest
        if oldest is None or self._reference.timestamp >= oldest.timestamp:
            return self._reference
        return oldest

    def update(
        self,
        sample: PoseSample,
        previous_sample: PoseSample,
        dt: float,
        reference_forward_axis: Optional[np.ndarray] = None,
    ) -> list[ThrustEvent]:
        """Feed one tick. Returns at most one event."""
        if dt <= 0:
            return []

        cfg = self._config
        local_forward = (
            cfg.reference_forward_axis
            if reference_forward_axis is None
            else reference_forward_axis
        )
        forward = quat_rotate(sample.orientation, np.asarray(local_forward, dtype=np.float64))

        frame_signed = float(np.dot(sample.position - previous_sample.position, forward))
        frame_velocity = abs(frame_signed) / dt

        if not self.history.is_full():
            return []

        reference = self.reference_sample
        window_signed = float(np.dot(sample.position - reference.position, forward))

        if not self._armed:
            if abs(window_signed) < cfg.rearm_distance_m:
                self._armed = True
                logger.debug("Thrust re-armed (hand %d)", self.hand_id)
            return []

        if (
            abs(window_signed) < cfg.distance_threshold_m
            or frame_velocity < cfg.velocity_threshold_m_per_sec
        ):
            return []

        self._armed = False
        self._reference = sample
        event = ThrustEvent(
            displacement_m=window_signed,
            velocity_m_per_sec=frame_velocity,
            timestamp=sample.timestamp,
            hand_id=self.hand_id,
        )
        logger.debug(
            "Thrust %s (hand %d): distance=%.3f m velocity=%.2f m/s",
            event.direction, self.hand_id, window_signed, frame_velocity,
        )
        return [event]

    def reset(self):
        """Re-arm and forget the last firing position."""
        self._armed = True
        self._reference = None
