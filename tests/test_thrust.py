"""Tests for push/pull detection."""

import numpy as np
import pytest

from motion_gestures.config import GestureConfig, ThrustConfig
from motion_gestures.events import PoseSample, ThrustEvent
from motion_gestures.history import PoseHistoryBuffer
from motion_gestures.spatial import IDENTITY, quat_from_axis_angle
from motion_gestures.synthetic import SyntheticStream, add_jitter
from motion_gestures.thrust import ThrustGestureDetector
from motion_gestures.tracker import MotionTracker


def _tracker(window: int = 10, distance: float = 0.03, velocity: float = 0.3) -> MotionTracker:
    return MotionTracker(GestureConfig(
        history_window_size=window,
        thrust=ThrustConfig(distance_threshold_m=distance, velocity_threshold_m_per_sec=velocity),
    ))


def _thrusts(tracker: MotionTracker, samples) -> list[ThrustEvent]:
    events = []
    for s in samples:
        events.extend(e for e in tracker.update(s) if isinstance(e, ThrustEvent))
    return events


class TestThrustSign:
    def test_push_fires_positive(self):
        samples = SyntheticStream().hold(0.2).thrust(0.05, duration=0.1).hold(0.5).samples
        events = _thrusts(_tracker(), samples)

        assert len(events) == 1
        assert events[0].displacement_m > 0
        assert events[0].displacement_m == pytest.approx(0.05 * 4 / 6)
        assert events[0].velocity_m_per_sec == pytest.approx(0.5)
        assert events[0].direction == "push"

    def test_pull_fires_negative(self):
        samples = SyntheticStream().hold(0.2).thrust(-0.05, duration=0.1).hold(0.5).samples
        events = _thrusts(_tracker(), samples)

        assert len(events) == 1
        assert events[0].displacement_m < 0
        assert events[0].direction == "pull"

    def test_forward_follows_orientation(self):
        # Device yawed 90 degrees: local forward (z) points along world x
        yawed = quat_from_axis_angle((0, 1, 0), 90.0)
        samples = (
            SyntheticStream(orientation=yawed)
            .hold(0.2)
            .move((0.05, 0.0, 0.0), duration=0.1)
            .hold(0.3)
            .samples
        )
        events = _thrusts(_tracker(), samples)
        assert len(events) == 1
        assert events[0].displacement_m > 0

    def test_sideways_motion_ignored(self):
        yawed = quat_from_axis_angle((0, 1, 0), 90.0)
        samples = (
            SyntheticStream(orientation=yawed)
            .hold(0.2)
            .move((0.0, 0.0, 0.05), duration=0.1)
            .hold(0.3)
            .samples
        )
        assert _thrusts(_tracker(), samples) == []


class TestThrustGates:
    def test_slow_motion_does_not_fire(self):
        # Distance accumulates past the threshold but velocity stays at 0.05 m/s
        samples = SyntheticStream().hold(0.2).thrust(0.05, duration=1.0).hold(0.2).samples
        assert _thrusts(_tracker(window=70), samples) == []

    def test_short_motion_does_not_fire(self):
        samples = SyntheticStream().hold(0.2).thrust(0.02, duration=1 / 30).hold(0.2).samples
        assert _thrusts(_tracker(), samples) == []

    def test_no_fire_while_warming_up(self):
        samples = SyntheticStream().thrust(0.2, duration=4 / 60).samples
        assert len(samples) == 5
        assert _thrusts(_tracker(window=10), samples) == []

    def test_jitter_does_not_fire(self):
        samples = add_jitter(SyntheticStream().hold(2.0).samples, position_sigma=0.001, seed=7)
        assert _thrusts(_tracker(), samples) == []


class TestThrustDebounce:
    def test_sustained_push_fires_once(self):
        samples = SyntheticStream().hold(0.2).thrust(0.1, duration=0.1).samples
        tracker = _tracker()
        events = _thrusts(tracker, samples)
        assert len(events) == 1
        assert not tracker.thrust_detector().armed

        events = _thrusts(tracker, SyntheticStream(
            start_time=samples[-1].timestamp,
            position=samples[-1].position,
        ).hold(0.5).samples[1:])
        assert events == []
        assert tracker.thrust_detector().armed

    def test_second_push_after_settling(self):
        samples = (
            SyntheticStream()
            .hold(0.2)
            .thrust(0.05, duration=0.1)
            .hold(0.3)
            .thrust(0.05, duration=0.1)
            .hold(0.3)
            .thrust(-0.1, duration=0.1)
            .hold(0.3)
            .samples
        )
        events = _thrusts(_tracker(), samples)
        assert [e.direction for e in events] == ["push", "push", "pull"]

    def test_rearm_band_is_half_threshold(self):
        history = PoseHistoryBuffer(2)
        detector = ThrustGestureDetector(ThrustConfig(distance_threshold_m=0.04), history)

        s0 = PoseSample(0.0, [0, 0, 0], IDENTITY)
        s1 = PoseSample(0.1, [0, 0, 0.05], IDENTITY)
        history.push(s0)
        history.push(s1)
        assert len(detector.update(s1, s0, 0.1)) == 1
        assert not detector.armed
        assert detector.reference_sample is s1

        # 0.025 from the firing pose: still inside the hysteresis band
        s2 = PoseSample(0.2, [0, 0, 0.075], IDENTITY)
        history.push(s2)
        assert detector.update(s2, s1, 0.1) == []
        assert not detector.armed

        # Window rolled past the firing sample; 0.01 from the oldest
        s3 = PoseSample(0.3, [0, 0, 0.085], IDENTITY)
        history.push(s3)
        assert detector.update(s3, s2, 0.1) == []
        assert detector.armed


class TestThrustDetectorDirect:
    def _pair(self):
        history = PoseHistoryBuffer(2)
        s0 = PoseSample(0.0, [0, 0, 0], IDENTITY)
        s1 = PoseSample(0.1, [0.05, 0, 0], IDENTITY)
        history.push(s0)
        history.push(s1)
        return history, s0, s1

    def test_forward_axis_override(self):
        history, s0, s1 = self._pair()
        detector = ThrustGestureDetector(ThrustConfig(distance_threshold_m=0.03), history)
        assert detector.update(s1, s0, 0.1) == []

        events = detector.update(s1, s0, 0.1, reference_forward_axis=np.array([1.0, 0, 0]))
        assert len(events) == 1
        assert events[0].displacement_m == pytest.approx(0.05)
        assert events[0].velocity_m_per_sec == pytest.approx(0.5)

    def test_configured_forward_axis(self):
        history, s0, s1 = self._pair()
        detector = ThrustGestureDetector(
            ThrustConfig(distance_threshold_m=0.03, reference_forward_axis=(-1.0, 0.0, 0.0)),
            history,
        )
        events = detector.update(s1, s0, 0.1)
        assert len(events) == 1
        assert events[0].direction == "pull"

    def test_non_positive_dt_skips(self):
        history, s0, s1 = self._pair()
        detector = ThrustGestureDetector(
            ThrustConfig(distance_threshold_m=0.03, reference_forward_axis=(1.0, 0.0, 0.0)),
            history,
        )
        assert detector.update(s1, s0, 0.0) == []
        assert detector.armed

    def test_reset_rearms(self):
        history, s0, s1 = self._pair()
        detector = ThrustGestureDetector(
            ThrustConfig(distance_threshold_m=0.03, reference_forward_axis=(1.0, 0.0, 0.0)),
            history,
            hand_id=1,
        )
        events = detector.update(s1, s0, 0.1)
        assert events[0].hand_id == 1
        assert not detector.armed
        detector.reset()
        assert detector.armed
        assert detector.reference_sample is s0
