"""Tests for the rolling pose window."""

import pytest

from motion_gestures.config import ConfigError
from motion_gestures.events import PoseSample
from motion_gestures.history import PoseHistoryBuffer
from motion_gestures.spatial import IDENTITY


def _sample(t: float) -> PoseSample:
    return PoseSample(t, [t, 0.0, 0.0], IDENTITY)


class TestPoseHistoryBuffer:
    def test_empty(self):
        buf = PoseHistoryBuffer(3)
        assert len(buf) == 0
        assert buf.oldest() is None
        assert buf.latest() is None
        assert not buf.is_full()

    def test_warming_up(self):
        buf = PoseHistoryBuffer(3)
        buf.push(_sample(0.0))
        buf.push(_sample(0.1))
        assert not buf.is_full()
        assert buf.oldest().timestamp == 0.0
        assert buf.latest().timestamp == 0.1

    def test_evicts_oldest(self):
        buf = PoseHistoryBuffer(3)
        for i in range(5):
            buf.push(_sample(i * 0.1))
        assert len(buf) == 3
        assert buf.is_full()
        assert buf.oldest().timestamp == pytest.approx(0.2)
        assert buf.latest().timestamp == pytest.approx(0.4)
        assert [s.timestamp for s in buf] == pytest.approx([0.2, 0.3, 0.4])

    def test_capacity_too_small(self):
        with pytest.raises(ConfigError):
            PoseHistoryBuffer(1)

    def test_resize_keeps_newest(self):
        buf = PoseHistoryBuffer(5)
        for i in range(5):
            buf.push(_sample(float(i)))
        buf.resize(3)
        assert buf.capacity == 3
        assert [s.timestamp for s in buf] == [2.0, 3.0, 4.0]

    def test_resize_larger_warms_up_again(self):
        buf = PoseHistoryBuffer(3)
        for i in range(3):
            buf.push(_sample(float(i)))
        buf.resize(6)
        assert len(buf) == 3
        assert not buf.is_full()

    def test_clear(self):
        buf = PoseHistoryBuffer(2)
        buf.push(_sample(0.0))
        buf.clear()
        assert len(buf) == 0
