"""Wrist-twist detection with two-threshold hysteresis.

A twist starts when the rotation accumulated across the full history window
crosses ``start_angle_threshold_deg`` while the instantaneous angular velocity
is above ``start_velocity_threshold_deg_per_sec``. It keeps going as long as
the velocity stays above the (lower) continue threshold, so momentary dips
don't chop one gesture into several.

Usage:
    history = PoseHistoryBuffer(capacity=10)
    detector = RotationGestureDetector(RotationConfig(), history)
    # Per tick, after history.push(sample):
    for evt in detector.update(sample, previous, dt):
        ...
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from motion_gestures.config import RotationConfig
from motion_gestures.events import (
    PoseSample,
    RotationContinuing,
    RotationEnded,
    RotationEvent,
    RotationPhase,
    RotationStarted,
)
from motion_gestures.history import PoseHistoryBuffer
from motion_gestures.spatial import (
    axis_angle,
    is_degenerate,
    lerp_axis,
    quat_inverse,
    quat_multiply,
    quat_rotate,
)

logger = logging.getLogger("motion_gestures.rotation")


def _delta(current: np.ndarray, reference: np.ndarray) -> tuple[float, np.ndarray]:
    """Angle and axis of the rotation taking ``reference`` to ``current``.

    A degenerate axis reports an angle of 0 so it can't drive transitions.
    """
    angle, axis = axis_angle(quat_multiply(current, quat_inverse(reference)))
    if is_degenerate(axis):
        return 0.0, axis
    return angle, axis


class RotationGestureDetector:
    """Idle/Rotating state machine over frame and window rotation deltas.

    One instance per tracked device; state is never shared between instances.
    """

    def __init__(
        self,
        config: Optional[RotationConfig] = None,
        history: Optional[PoseHistoryBuffer] = None,
        hand_id: int = 0,
    ):
        self._config = config or RotationConfig()
        self.history = history if history is not None else PoseHistoryBuffer(10)
        self.hand_id = hand_id

        self._phase = RotationPhase.IDLE
        self._smoothed_axis = np.zeros(3)
        self._accumulated = 0.0
        self._below_since: Optional[float] = None

    @property
    def config(self) -> RotationConfig:
        return self._config

    @config.setter
    def config(self, value: RotationConfig):
        self._config = value

    @property
    def phase(self) -> RotationPhase:
        return self._phase

    @property
    def is_rotating(self) -> bool:
        return self._phase is RotationPhase.ROTATING

    @property
    def smoothed_axis(self) -> np.ndarray:
        return self._smoothed_axis.copy()

    @property
    def accumulated_angle_deg(self) -> float:
        return self._accumulated

    def update(
        self, sample: PoseSample, previous_sample: PoseSample, dt: float
    ) -> list[RotationEvent]:
        """Feed one tick. Returns at most one event."""
        if dt <= 0:
            return []

        frame_angle, frame_axis = _delta(sample.orientation, previous_sample.orientation)
        frame_magnitude = abs(frame_angle)
        angular_velocity = frame_magnitude / dt

        if self._phase is RotationPhase.IDLE:
            return self._try_start(sample, angular_velocity)
        return self._track(sample, frame_angle, frame_axis, angular_velocity)

    def _try_start(self, sample: PoseSample, angular_velocity: float) -> list[RotationEvent]:
        cfg = self._config
        if not self.history.is_full():
            return []

        oldest = self.history.oldest()
        total_angle, total_axis = _delta(sample.orientation, oldest.orientation)

        if (
            abs(total_angle) < cfg.start_angle_threshold_deg
            or angular_velocity < cfg.start_velocity_threshold_deg_per_sec
        ):
            return []

        self._phase = RotationPhase.ROTATING
        self._smoothed_axis = total_axis
        self._accumulated = total_angle
        self._below_since = None

        axis = self._report_axis(sample)
        logger.debug(
            "Rotation started (hand %d): axis=%s angle=%.2f velocity=%.1f deg/s",
            self.hand_id, np.round(axis, 3).tolist(), total_angle, angular_velocity,
        )
        return [RotationStarted(
            timestamp=sample.timestamp,
            hand_id=self.hand_id,
            axis=axis,
            total_angle_deg=total_angle,
        )]

    def _track(
        self,
        sample: PoseSample,
        frame_angle: float,
        frame_axis: np.ndarray,
        angular_velocity: float,
    ) -> list[RotationEvent]:
        cfg = self._config
        frame_magnitude = abs(frame_angle)

        # Measure the frame about the smoothed axis; a reversed twist counts
        # negative instead of flipping the axis.
        signed_angle = 0.0
        aligned_axis = frame_axis
        if frame_magnitude > 0.0:
            rotation_vector = frame_axis * frame_angle
            sign = 1.0 if float(np.dot(rotation_vector, self._smoothed_axis)) >= 0 else -1.0
            signed_angle = sign * frame_magnitude
            if float(np.dot(frame_axis, self._smoothed_axis)) < 0:
                aligned_axis = -frame_axis

        if angular_velocity >= cfg.continue_velocity_threshold_deg_per_sec:
            self._below_since = None
            if frame_magnitude > cfg.axis_update_min_angle_deg and not is_degenerate(aligned_axis):
                self._smoothed_axis = lerp_axis(
                    self._smoothed_axis, aligned_axis, 1.0 - cfg.axis_smoothing_factor
                )
            self._accumulated += signed_angle
            return [RotationContinuing(
                timestamp=sample.timestamp,
                hand_id=self.hand_id,
                axis=self._report_axis(sample),
                frame_angle_deg=signed_angle,
            )]

        if cfg.end_delay_seconds > 0:
            if self._below_since is None:
                self._below_since = sample.timestamp
            if sample.timestamp - self._below_since < cfg.end_delay_seconds:
                self._accumulated += signed_angle
                return []

        total = self._accumulated
        logger.debug("Rotation ended (hand %d): total=%.2f deg", self.hand_id, total)
        self._enter_idle()
        return [RotationEnded(
            timestamp=sample.timestamp,
            hand_id=self.hand_id,
            total_angle_deg=total,
        )]

    def _report_axis(self, sample: PoseSample) -> np.ndarray:
        if self._config.report_local_axis:
            return quat_rotate(quat_inverse(sample.orientation), self._smoothed_axis)
        return self._smoothed_axis.copy()

    def _enter_idle(self):
        self._phase = RotationPhase.IDLE
        self._smoothed_axis = np.zeros(3)
        self._accumulated = 0.0
        self._below_since = None

    def reset(self):
        """Return to Idle, discarding any gesture in progress."""
        self._enter_idle()
