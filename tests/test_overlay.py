import numpy as np
import pytest

pytest.importorskip("cv2")
pytest.importorskip("mediapipe")

import overlay
from exercise_logic import CounterState, DisplayPayload
from poses import standing


def _blank():
    return np.zeros((200, 100, 3), dtype=np.uint8)


def _sparse(joints):
    frame = [None] * 33
    for idx, point in joints.items():
        frame[idx] = point
    return frame


def test_draw_landmarks_connects_hip_to_knee():
    image = _blank()
    overlay.draw_landmarks(image, _sparse({23: (0.4, 0.5), 25: (0.4, 0.7)}))
    # midway between left hip (40, 100) and left knee (40, 140)
    assert tuple(image[120, 40]) == overlay.CONNECTION_COLOR


def test_draw_landmarks_skips_edges_with_a_missing_end():
    image = _blank()
    # hip and ankle without the knee between them
    overlay.draw_landmarks(image, _sparse({23: (0.4, 0.5), 27: (0.4, 0.9)}))
    assert not image[120:160, 40].any()


def test_draw_landmarks_marks_joints():
    image = _blank()
    overlay.draw_landmarks(image, standing())
    # left hip at (0.4, 0.5) -> pixel (40, 100)
    assert tuple(image[100, 40]) == overlay.LANDMARK_COLOR
    assert image.any()


def test_draw_landmarks_without_detection_leaves_image_alone():
    image = _blank()
    overlay.draw_landmarks(image, None)
    overlay.draw_landmarks(image, [])
    assert not image.any()


def test_draw_landmarks_skips_missing_joints():
    image = _blank()
    frame = [None] * 33
    frame[11] = (0.5, 0.5)
    overlay.draw_landmarks(image, frame)
    assert tuple(image[100, 50]) == overlay.LANDMARK_COLOR
    assert not image[:60].any()


def test_hud_lines_with_payload():
    payload = DisplayPayload(3, "Up", 178.04, 179.5, 91.26, 88.0)
    assert overlay.hud_lines(payload) == [
        "Reps: 3",
        "Stage: Up",
        "Hip L: 91.3",
        "Knee L: 178.0",
        "Hip R: 88.0",
        "Knee R: 179.5",
    ]


def test_hud_lines_fall_back_to_snapshot():
    assert overlay.hud_lines(None, CounterState(2, "Down")) == ["Reps: 2", "Stage: Down"]
    assert overlay.hud_lines(None) == ["Reps: 0", "Stage: None"]


def test_draw_hud_writes_text():
    image = _blank()
    overlay.draw_hud(image, None, CounterState(1, "Up"))
    assert image.any()
