"""Prometheus-style metrics for motion gesture detection.

Renders the Prometheus text exposition format directly; serving it is left
to the caller.

Tracked metrics:
- motion_gestures_rotation_events_total (counter, by kind)
- motion_gestures_thrust_events_total (counter, by direction)
- motion_gestures_ticks_total (counter)
- motion_gestures_skipped_ticks_total (counter)
- motion_gestures_tick_latency_seconds (histogram)
"""

from __future__ import annotations

import threading
import time
from collections import Counter

from motion_gestures.events import RotationEvent, ThrustEvent


class _Histogram:
    """Simple histogram with configurable buckets."""

    def __init__(self, buckets: list[float]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, b in enumerate(self.buckets):
                if value <= b:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> str:
        lines = [
            f"# HELP {name} {help_text}",
            f"# TYPE {name} histogram",
        ]
        with self._lock:
            cumulative = 0
            for i, b in enumerate(self.buckets):
                cumulative += self.bucket_counts[i]
                lines.append(f'{name}_bucket{{le="{b}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return "\n".join(lines)


class MetricsCollector:
    """Counts detected gestures and tick timings.

    Safe to share between trackers running on different threads.
    """

    def __init__(self):
        self._rotation_counts: Counter = Counter()
        self._thrust_counts: Counter = Counter()
        self._ticks_total = 0
        self._skipped_total = 0
        self._lock = threading.Lock()

        # Per-tick work is tiny; buckets from 10us to 10ms
        self._latency = _Histogram(
            [0.00001, 0.00005, 0.0001, 0.0005, 0.001, 0.005, 0.010]
        )
        self._start_time = time.time()

    def record_rotation(self, event: RotationEvent):
        with self._lock:
            self._rotation_counts[event.kind.value] += 1

    def record_thrust(self, event: ThrustEvent):
        with self._lock:
            self._thrust_counts[event.direction] += 1

    def record_tick(self, latency_seconds: float, skipped: bool = False):
        with self._lock:
            self._ticks_total += 1
            if skipped:
                self._skipped_total += 1
        self._latency.observe(latency_seconds)

    def render(self) -> str:
        """Render all metrics in Prometheus text exposition format."""
        lines: list[str] = []

        uptime = time.time() - self._start_time
        lines.append("# HELP motion_gestures_uptime_seconds Time since collector creation")
        lines.append("# TYPE motion_gestures_uptime_seconds gauge")
        lines.append(f"motion_gestures_uptime_seconds {uptime:.1f}")
        lines.append("")

        lines.append("# HELP motion_gestures_rotation_events_total Twist events by kind")
        lines.append("# TYPE motion_gestures_rotation_events_total counter")
        with self._lock:
            for kind, count in sorted(self._rotation_counts.items()):
                lines.append(f'motion_gestures_rotation_events_total{{kind="{kind}"}} {count}')
        lines.append("")

        lines.append("# HELP motion_gestures_thrust_events_total Thrust events by direction")
        lines.append("# TYPE motion_gestures_thrust_events_total counter")
        with self._lock:
            for direction, count in sorted(self._thrust_counts.items()):
                lines.append(
                    f'motion_gestures_thrust_events_total{{direction="{direction}"}} {count}'
                )
        lines.append("")

        lines.append(self._latency.render(
            "motion_gestures_tick_latency_seconds",
            "Per-tick detection latency in seconds",
        ))
        lines.append("")

        with self._lock:
            ticks, skipped = self._ticks_total, self._skipped_total
        lines.append("# HELP motion_gestures_ticks_total Pose samples processed")
        lines.append("# TYPE motion_gestures_ticks_total counter")
        lines.append(f"motion_gestures_ticks_total {ticks}")
        lines.append("")

        lines.append("# HELP motion_gestures_skipped_ticks_total Samples dropped for stale timestamps")
        lines.append("# TYPE motion_gestures_skipped_ticks_total counter")
        lines.append(f"motion_gestures_skipped_ticks_total {skipped}")
        lines.append("")

        return "\n".join(lines) + "\n"

    @property
    def rotation_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._rotation_counts)

    @property
    def thrust_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._thrust_counts)

    @property
    def ticks_total(self) -> int:
        return self._ticks_total

    @property
    def skipped_total(self) -> int:
        return self._skipped_total
