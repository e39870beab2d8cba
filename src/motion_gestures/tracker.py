"""Per-device tracking: feeds pose samples through both gesture detectors.

Usage:
    tracker = MotionTracker(GestureConfig.from_yaml("gestures.yml"))
    # Per sample from the device:
    for evt in tracker.update(sample, hand_id=0):
        handle(evt)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Optional

from motion_gestures.config import GestureConfig
from motion_gestures.events import GestureEvent, PoseSample, RotationEvent
from motion_gestures.history import PoseHistoryBuffer
from motion_gestures.metrics import MetricsCollector
from motion_gestures.rotation import RotationGestureDetector
from motion_gestures.thrust import ThrustGestureDetector

logger = logging.getLogger("motion_gestures.tracker")


@dataclass
class _HandState:
    """Everything owned by one tracked device."""
    history: PoseHistoryBuffer
    rotation: RotationGestureDetector
    thrust: ThrustGestureDetector
    previous: Optional[PoseSample] = None


class MotionTracker:
    """Runs twist and thrust detection for one or more tracked devices.

    Each ``hand_id`` gets its own history window and detector pair, so left
    and right controllers never share state. Calls for a given tracker must
    be serialized; ``configure`` may only be called between ticks.
    """

    def __init__(
        self,
        config: Optional[GestureConfig] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self._config = config or GestureConfig()
        self.metrics = metrics
        self._hands: dict[int, _HandState] = {}

    @property
    def config(self) -> GestureConfig:
        return self._config

    @property
    def hands(self) -> list[int]:
        return list(self._hands)

    def configure(self, config: GestureConfig):
        """Replace the configuration for all tracked devices."""
        self._config = config
        for state in self._hands.values():
            state.history.resize(config.history_window_size)
            state.rotation.config = config.rotation
            state.thrust.config = config.thrust
        logger.info(
            "Configuration replaced (window=%d, %d hand(s))",
            config.history_window_size, len(self._hands),
        )

    def update(self, sample: PoseSample, hand_id: int = 0) -> list[GestureEvent]:
        """Feed one pose sample for ``hand_id``. Returns detected events."""
        t0 = time.perf_counter()
        state = self._hands.get(hand_id)
        if state is None:
            state = self._create_hand(hand_id)

        events: list[GestureEvent] = []
        skipped = False

        if state.previous is None:
            state.history.push(sample)
            state.previous = sample
        else:
            dt = sample.timestamp - state.previous.timestamp
            if dt <= 0:
                skipped = True
                logger.debug(
                    "Dropping sample for hand %d: timestamp %.6f not after %.6f",
                    hand_id, sample.timestamp, state.previous.timestamp,
                )
            else:
                state.history.push(sample)
                events.extend(state.rotation.update(sample, state.previous, dt))
                events.extend(state.thrust.update(sample, state.previous, dt))
                state.previous = sample

        if self.metrics is not None:
            for event in events:
                if isinstance(event, RotationEvent):
                    self.metrics.record_rotation(event)
                else:
                    self.metrics.record_thrust(event)
            self.metrics.record_tick(time.perf_counter() - t0, skipped=skipped)

        return events

    def _create_hand(self, hand_id: int) -> _HandState:
        history = PoseHistoryBuffer(self._config.history_window_size)
        state = _HandState(
            history=history,
            rotation=RotationGestureDetector(self._config.rotation, history, hand_id=hand_id),
            thrust=ThrustGestureDetector(self._config.thrust, history, hand_id=hand_id),
        )
        self._hands[hand_id] = state
        return state

    def is_rotating(self, hand_id: int = 0) -> bool:
        state = self._hands.get(hand_id)
        return state is not None and state.rotation.is_rotating

    def rotation_detector(self, hand_id: int = 0) -> Optional[RotationGestureDetector]:
        state = self._hands.get(hand_id)
        return state.rotation if state else None

    def thrust_detector(self, hand_id: int = 0) -> Optional[ThrustGestureDetector]:
        state = self._hands.get(hand_id)
        return state.thrust if state else None

    def reset(self, hand_id: Optional[int] = None):
        """Re-initialize one device (e.g. after it was reacquired) or all of them."""
        if hand_id is not None:
            self._hands.pop(hand_id, None)
        else:
            self._hands.clear()
