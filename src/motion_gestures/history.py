"""Rolling window of recent pose samples."""

from __future__ import annotations

from collections import deque
from typing import Iterator, Optional

from motion_gestures.config import ConfigError
from motion_gestures.events import PoseSample


class PoseHistoryBuffer:
    """Fixed-capacity window of the most recent pose samples.

    Measures rotation and translation accumulated across the window instead
    of a single noisy frame. The buffer is "warming up" until it holds
    ``capacity`` samples; window-based checks should wait for ``is_full()``.
    """

    def __init__(self, capacity: int):
        if capacity < 2:
            raise ConfigError(f"history capacity must be >= 2, got {capacity}")
        self._samples: deque[PoseSample] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._samples.maxlen

    def push(self, sample: PoseSample):
        """Append a sample, evicting the oldest when full."""
        self._samples.append(sample)

    def oldest(self) -> Optional[PoseSample]:
        return self._samples[0] if self._samples else None

    def latest(self) -> Optional[PoseSample]:
        return self._samples[-1] if self._samples else None

    def is_full(self) -> bool:
        return len(self._samples) == self._samples.maxlen

    def resize(self, capacity: int):
        """Change capacity, keeping the newest samples."""
        if capacity < 2:
            raise ConfigError(f"history capacity must be >= 2, got {capacity}")
        if capacity != self._samples.maxlen:
            self._samples = deque(self._samples, maxlen=capacity)

    def clear(self):
        self._samples.clear()

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PoseSample]:
        return iter(self._samples)
