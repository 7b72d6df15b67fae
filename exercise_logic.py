import logging
import math
import threading
from collections import namedtuple

import numpy as np

logger = logging.getLogger(__name__)

# MediaPipe Pose landmark numbering
LEFT_SHOULDER, RIGHT_SHOULDER = 11, 12
LEFT_HIP, RIGHT_HIP = 23, 24
LEFT_KNEE, RIGHT_KNEE = 25, 26
LEFT_ANKLE, RIGHT_ANKLE = 27, 28

REQUIRED_JOINTS = (
    LEFT_SHOULDER, RIGHT_SHOULDER,
    LEFT_HIP, RIGHT_HIP,
    LEFT_KNEE, RIGHT_KNEE,
    LEFT_ANKLE, RIGHT_ANKLE,
)

# inclusive angle ranges in degrees
STRAIGHT_RANGE = (170, 185)
BENT_RANGE = (85, 95)

STAGE_UP = "Up"
STAGE_DOWN = "Down"

MODES = ("literal", "corrected")

CounterState = namedtuple("CounterState", ["count", "stage"], defaults=(0, None))

JointAngles = namedtuple("JointAngles", ["knee_left", "knee_right", "hip_left", "hip_right"])

DisplayPayload = namedtuple(
    "DisplayPayload",
    ["count", "stage", "knee_left", "knee_right", "hip_left", "hip_right"],
)


def calculate_angle(a, b, c):
    """Angle at vertex ``b`` formed by ``a`` and ``c``, in degrees [0, 180]."""
    a = np.array(a, dtype=float)
    b = np.array(b, dtype=float)
    c = np.array(c, dtype=float)

    radians = np.arctan2(c[1]-b[1], c[0]-b[0]) - \
              np.arctan2(a[1]-b[1], a[0]-b[0])
    angle = np.abs(radians * 180.0/np.pi)

    if angle > 180:
        angle = 360 - angle
    return float(angle)


def _xy(joint):
    if joint is None:
        return None
    if hasattr(joint, "x") and hasattr(joint, "y"):
        return float(joint.x), float(joint.y)
    x, y = joint[0], joint[1]
    return float(x), float(y)


def _valid(point):
    return all(math.isfinite(v) and 0.0 <= v <= 1.0 for v in point)


def joint_angles(frame):
    """Knee and hip angles for one frame, or None when the frame must be skipped."""
    if frame is None or len(frame) == 0:
        return None
    if len(frame) <= max(REQUIRED_JOINTS):
        logger.debug("Skipping frame with %d landmarks", len(frame))
        return None

    points = {}
    for idx in REQUIRED_JOINTS:
        try:
            point = _xy(frame[idx])
        except (TypeError, ValueError, IndexError):
            logger.debug("Skipping frame, malformed landmark %d: %r", idx, frame[idx])
            return None
        if point is None:
            logger.debug("Skipping frame, landmark %d missing", idx)
            return None
        if not _valid(point):
            logger.debug("Skipping frame, landmark %d out of range: %r", idx, point)
            return None
        points[idx] = point

    return JointAngles(
        knee_left=calculate_angle(points[LEFT_HIP], points[LEFT_KNEE], points[LEFT_ANKLE]),
        knee_right=calculate_angle(points[RIGHT_HIP], points[RIGHT_KNEE], points[RIGHT_ANKLE]),
        hip_left=calculate_angle(points[LEFT_SHOULDER], points[LEFT_HIP], points[LEFT_KNEE]),
        hip_right=calculate_angle(points[RIGHT_SHOULDER], points[RIGHT_HIP], points[RIGHT_KNEE]),
    )


def _within(angle, bounds):
    low, high = bounds
    return low <= angle <= high


def knees_straight(angles):
    return _within(angles.knee_left, STRAIGHT_RANGE) and _within(angles.knee_right, STRAIGHT_RANGE)


def hips_straight(angles):
    return _within(angles.hip_left, STRAIGHT_RANGE) and _within(angles.hip_right, STRAIGHT_RANGE)


def hips_bent_90(angles):
    return _within(angles.hip_left, BENT_RANGE) and _within(angles.hip_right, BENT_RANGE)


def _literal_transition(state, angles):
    standing = knees_straight(angles) and hips_straight(angles)

    if standing:
        return state._replace(stage=STAGE_UP)
    # shares the guard above, never reached
    elif standing:
        return CounterState(count=state.count + 1, stage=STAGE_DOWN)
    elif state.stage == STAGE_DOWN and hips_bent_90(angles) and knees_straight(angles):
        return state._replace(stage=STAGE_UP)
    return state


def _corrected_transition(state, angles):
    standing = knees_straight(angles) and hips_straight(angles)
    folded = hips_bent_90(angles) and knees_straight(angles)

    if folded and state.stage != STAGE_DOWN:
        return state._replace(stage=STAGE_DOWN)
    elif standing and state.stage == STAGE_DOWN:
        return CounterState(count=state.count + 1, stage=STAGE_UP)
    elif standing and state.stage is None:
        return state._replace(stage=STAGE_UP)
    return state


_TRANSITIONS = {
    "literal": _literal_transition,
    "corrected": _corrected_transition,
}


def _check_mode(mode):
    if mode not in _TRANSITIONS:
        raise ValueError(f"Unknown counting mode {mode!r}, expected one of {MODES}")


def update(state, frame, mode="literal"):
    """Advance ``state`` by one frame.

    Returns ``(new_state, payload)``. Frames without a complete, valid set of
    shoulder/hip/knee/ankle landmarks leave the state untouched and yield no
    payload.
    """
    _check_mode(mode)
    angles = joint_angles(frame)
    if angles is None:
        return state, None

    new_state = _TRANSITIONS[mode](state, angles)
    payload = DisplayPayload(new_state.count, new_state.stage, *angles)
    return new_state, payload


class ExerciseCounter:
    def __init__(self, mode="literal"):
        _check_mode(mode)
        self.mode = mode
        self._state = CounterState()
        self._lock = threading.Lock()

    @property
    def count(self):
        return self.snapshot().count

    @property
    def stage(self):
        return self.snapshot().stage

    def snapshot(self):
        with self._lock:
            return self._state

    def process(self, frame):
        with self._lock:
            previous = self._state
            self._state, payload = update(previous, frame, self.mode)

        if payload is not None and payload.count > previous.count:
            logger.info("Rep %d (stage=%s)", payload.count, payload.stage)
        return payload
