"""Pose session recording and replay.

Capture real controller sessions to disk for:
- Reproducible detector tuning without a headset
- Regression tests on headless machines
- Deterministic demos
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from motion_gestures.events import PoseSample

logger = logging.getLogger("motion_gestures.recorder")

FORMAT_VERSION = 1


@dataclass
class RecordedSample:
    """A single pose sample in a recording."""
    hand_id: int
    sample: PoseSample

    def to_dict(self) -> dict:
        return {"hand_id": self.hand_id, **self.sample.to_dict()}


class PoseRecorder:
    """Records pose samples to a file.

    Usage:
        recorder = PoseRecorder()
        recorder.start()
        # In your tracking loop:
        recorder.add_sample(sample, hand_id=0)
        # When done:
        recorder.save("session.json")
    """

    def __init__(self):
        self._samples: list[RecordedSample] = []
        self._recording = False

    def start(self):
        """Begin a new recording session."""
        self._samples = []
        self._recording = True

    def stop(self) -> int:
        """Stop recording. Returns number of samples captured."""
        self._recording = False
        return len(self._samples)

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def duration(self) -> float:
        """Seconds between the first and last recorded sample."""
        if not self._samples:
            return 0.0
        times = [r.sample.timestamp for r in self._samples]
        return max(times) - min(times)

    def add_sample(self, sample: PoseSample, hand_id: int = 0):
        if not self._recording:
            return
        self._samples.append(RecordedSample(hand_id=hand_id, sample=sample))

    def extend(self, samples, hand_id: int = 0):
        """Add several samples for one hand."""
        for sample in samples:
            self.add_sample(sample, hand_id=hand_id)

    def save(self, path: str | Path) -> Path:
        """Save recording to JSON."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": FORMAT_VERSION,
            "sample_count": len(self._samples),
            "duration": self.duration,
            "samples": [r.to_dict() for r in self._samples],
        }

        with open(path, "w") as f:
            json.dump(data, f)

        logger.info("Saved %d samples to %s", len(self._samples), path)
        return path

    def save_compact(self, path: str | Path) -> Path:
        """Save in compact numpy npz format."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)

        n = len(self._samples)
        hand_ids = np.array([r.hand_id for r in self._samples], dtype=np.int32)
        timestamps = np.array([r.sample.timestamp for r in self._samples], dtype=np.float64)
        positions = np.zeros((n, 3), dtype=np.float64)
        orientations = np.zeros((n, 4), dtype=np.float64)
        for i, r in enumerate(self._samples):
            positions[i] = r.sample.position
            orientations[i] = r.sample.orientation

        np.savez_compressed(
            path,
            version=np.array([FORMAT_VERSION]),
            hand_ids=hand_ids,
            timestamps=timestamps,
            positions=positions,
            orientations=orientations,
        )

        logger.info("Saved %d samples to %s", n, path)
        return path


class PosePlayer:
    """Replays a recorded pose session.

    Usage:
        player = PosePlayer.load("session.json")
        for rec in player.play():
            tracker.update(rec.sample, hand_id=rec.hand_id)
    """

    def __init__(self, samples: list[RecordedSample]):
        self._samples = samples

    @classmethod
    def load(cls, path: str | Path) -> PosePlayer:
        """Load a recording from JSON or npz."""
        path = Path(path)

        if path.suffix == ".npz":
            return cls._load_compact(path)

        with open(path) as f:
            data = json.load(f)

        version = data.get("version", FORMAT_VERSION)
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        samples = [
            RecordedSample(
                hand_id=int(entry.get("hand_id", 0)),
                sample=PoseSample.from_dict(entry),
            )
            for entry in data["samples"]
        ]
        return cls(samples)

    @classmethod
    def _load_compact(cls, path: Path) -> PosePlayer:
        data = np.load(path, allow_pickle=False)
        version = int(data["version"][0]) if "version" in data.files else FORMAT_VERSION
        if version != FORMAT_VERSION:
            raise ValueError(f"Unsupported recording version {version} in {path}")

        hand_ids = data["hand_ids"]
        timestamps = data["timestamps"]
        positions = data["positions"]
        orientations = data["orientations"]

        samples = [
            RecordedSample(
                hand_id=int(hand_ids[i]),
                sample=PoseSample(
                    timestamp=float(timestamps[i]),
                    position=positions[i],
                    orientation=orientations[i],
                ),
            )
            for i in range(len(timestamps))
        ]
        return cls(samples)

    @property
    def sample_count(self) -> int:
        return len(self._samples)

    @property
    def duration(self) -> float:
        if not self._samples:
            return 0.0
        times = [r.sample.timestamp for r in self._samples]
        return max(times) - min(times)

    @property
    def hand_ids(self) -> list[int]:
        return sorted({r.hand_id for r in self._samples})

    def play(self) -> Iterator[RecordedSample]:
        """Iterate through all samples instantly (no timing)."""
        yield from self._samples

    def play_realtime(self, speed: float = 1.0) -> Iterator[RecordedSample]:
        """Replay at original timing (or scaled by speed factor)."""
        if not self._samples:
            return

        start = time.monotonic()
        t_first = self._samples[0].sample.timestamp

        for rec in self._samples:
            target_time = (rec.sample.timestamp - t_first) / speed
            elapsed = time.monotonic() - start
            if target_time > elapsed:
                time.sleep(target_time - elapsed)
            yield rec

    def get_sample(self, index: int) -> Optional[RecordedSample]:
        if 0 <= index < len(self._samples):
            return self._samples[index]
        return None
