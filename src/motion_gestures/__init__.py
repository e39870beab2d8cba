"""MotionGestures - Twist and thrust detection for 6-DoF tracked controllers."""

__version__ = "0.1.0"

from motion_gestures.config import ConfigError, GestureConfig, RotationConfig, ThrustConfig
from motion_gestures.events import (
    PoseSample,
    RotationPhase,
    RotationEvent,
    RotationStarted,
    RotationContinuing,
    RotationEnded,
    ThrustEvent,
)
from motion_gestures.history import PoseHistoryBuffer
from motion_gestures.rotation import RotationGestureDetector
from motion_gestures.thrust import ThrustGestureDetector
from motion_gestures.tracker import MotionTracker
from motion_gestures.recorder import PoseRecorder, PosePlayer
from motion_gestures.metrics import MetricsCollector
