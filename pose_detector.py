import logging

import cv2
import mediapipe as mp

logger = logging.getLogger(__name__)

MIN_DETECTION_CONFIDENCE = 0.5
MIN_TRACKING_CONFIDENCE = 0.5


def landmarks_from_results(results, min_visibility=0.0):
    """Convert a MediaPipe Pose result into a list of normalized (x, y) joints.

    Landmarks whose visibility falls below ``min_visibility`` become None so
    the counter treats them as undetected. Returns None when no person was found.
    """
    if results is None or not results.pose_landmarks:
        return None

    frame = []
    for lm in results.pose_landmarks.landmark:
        if getattr(lm, "visibility", 1.0) < min_visibility:
            frame.append(None)
        else:
            frame.append((lm.x, lm.y))
    return frame


class PoseDetector:
    def __init__(self, min_visibility=0.0):
        self.mp_pose = mp.solutions.pose
        self.pose = self.mp_pose.Pose(
            min_detection_confidence=MIN_DETECTION_CONFIDENCE,
            min_tracking_confidence=MIN_TRACKING_CONFIDENCE,
        )
        self.min_visibility = min_visibility

    def detect(self, frame):
        imgRGB = cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)
        imgRGB.flags.writeable = False
        results = self.pose.process(imgRGB)

        landmarks = landmarks_from_results(results, self.min_visibility)
        if landmarks is None:
            logger.debug("No landmarks detected.")
        return landmarks

    def close(self):
        self.pose.close()
