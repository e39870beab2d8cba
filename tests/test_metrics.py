"""Tests for Prometheus metrics."""

import numpy as np

from motion_gestures.events import RotationContinuing, RotationEnded, RotationStarted, ThrustEvent
from motion_gestures.metrics import MetricsCollector

Y = np.array([0.0, 1.0, 0.0])


class TestMetricsCollector:
    def test_record_rotation(self):
        m = MetricsCollector()
        m.record_rotation(RotationStarted(0.0, 0, Y, 20.0))
        m.record_rotation(RotationContinuing(0.1, 0, Y, 2.0))
        m.record_rotation(RotationContinuing(0.2, 0, Y, 2.0))
        m.record_rotation(RotationEnded(0.3, 0, 24.0))
        assert m.rotation_counts == {"started": 1, "continuing": 2, "ended": 1}

    def test_record_thrust(self):
        m = MetricsCollector()
        m.record_thrust(ThrustEvent(0.12, 0.8, 1.0))
        m.record_thrust(ThrustEvent(-0.11, 0.5, 2.0))
        m.record_thrust(ThrustEvent(0.15, 0.9, 3.0))
        assert m.thrust_counts == {"push": 2, "pull": 1}

    def test_record_tick(self):
        m = MetricsCollector()
        m.record_tick(0.00002)
        m.record_tick(0.00001, skipped=True)
        assert m.ticks_total == 2
        assert m.skipped_total == 1

    def test_render_prometheus_format(self):
        m = MetricsCollector()
        m.record_rotation(RotationStarted(0.0, 0, Y, 20.0))
        m.record_thrust(ThrustEvent(0.12, 0.8, 1.0))
        m.record_tick(0.00002)

        output = m.render()
        assert 'motion_gestures_rotation_events_total{kind="started"} 1' in output
        assert 'motion_gestures_thrust_events_total{direction="push"} 1' in output
        assert "motion_gestures_ticks_total 1" in output
        assert "motion_gestures_skipped_ticks_total 0" in output
        assert "# HELP" in output
        assert "# TYPE" in output

    def test_histogram_buckets(self):
        m = MetricsCollector()
        for _ in range(10):
            m.record_tick(0.00003)
        m.record_tick(1.0)
        output = m.render()
        assert 'motion_gestures_tick_latency_seconds_bucket{le="5e-05"} 10' in output
        assert 'motion_gestures_tick_latency_seconds_bucket{le="+Inf"} 11' in output
        assert "motion_gestures_tick_latency_seconds_count 11" in output
