import cv2
import mediapipe as mp

LANDMARK_COLOR = (0, 0, 255)      # red, BGR
CONNECTION_COLOR = (0, 255, 0)    # green
TEXT_COLOR = (255, 255, 255)
LANDMARK_RADIUS = 8
CONNECTION_THICKNESS = 4

POSE_CONNECTIONS = mp.solutions.pose.POSE_CONNECTIONS


def _pixel(joint, w, h):
    return int(joint[0] * w), int(joint[1] * h)


def _get(landmarks, idx):
    if idx < len(landmarks):
        return landmarks[idx]
    return None


def draw_landmarks(image, landmarks):
    """Draw the skeleton in place. Missing joints and their edges are skipped."""
    if not landmarks:
        return image
    h, w = image.shape[:2]

    for start, end in POSE_CONNECTIONS:
        a, b = _get(landmarks, start), _get(landmarks, end)
        if a is not None and b is not None:
            cv2.line(image, _pixel(a, w, h), _pixel(b, w, h), CONNECTION_COLOR, CONNECTION_THICKNESS)

    for joint in landmarks:
        if joint is not None:
            cv2.circle(image, _pixel(joint, w, h), LANDMARK_RADIUS, LANDMARK_COLOR, cv2.FILLED)
    return image


def hud_lines(payload, snapshot=None):
    if payload is None:
        count = snapshot.count if snapshot is not None else 0
        stage = snapshot.stage if snapshot is not None else None
        return [f"Reps: {count}", f"Stage: {stage}"]
    return [
        f"Reps: {payload.count}",
        f"Stage: {payload.stage}",
        f"Hip L: {payload.hip_left:.1f}",
        f"Knee L: {payload.knee_left:.1f}",
        f"Hip R: {payload.hip_right:.1f}",
        f"Knee R: {payload.knee_right:.1f}",
    ]


def draw_hud(image, payload, snapshot=None):
    y = 30
    for line in hud_lines(payload, snapshot):
        cv2.putText(image, line, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.8, TEXT_COLOR, 2)
        y += 30
    return image
