from exercise_logic import (
    LEFT_ANKLE, LEFT_HIP, LEFT_KNEE, LEFT_SHOULDER,
    RIGHT_ANKLE, RIGHT_HIP, RIGHT_KNEE, RIGHT_SHOULDER,
)

NUM_LANDMARKS = 33


def _frame(left, right):
    frame = [(0.5, 0.1)] * NUM_LANDMARKS
    frame[LEFT_SHOULDER], frame[LEFT_HIP], frame[LEFT_KNEE], frame[LEFT_ANKLE] = left
    frame[RIGHT_SHOULDER], frame[RIGHT_HIP], frame[RIGHT_KNEE], frame[RIGHT_ANKLE] = right
    return frame


def standing():
    """Knees and hips at 180 degrees."""
    return _frame(
        [(0.4, 0.2), (0.4, 0.5), (0.4, 0.7), (0.4, 0.9)],
        [(0.6, 0.2), (0.6, 0.5), (0.6, 0.7), (0.6, 0.9)],
    )


def folded():
    """Hips at 90 degrees, knees straight."""
    return _frame(
        [(0.2, 0.5), (0.4, 0.5), (0.4, 0.7), (0.4, 0.9)],
        [(0.8, 0.5), (0.6, 0.5), (0.6, 0.7), (0.6, 0.9)],
    )


def knees_bent():
    """Hips straight, knees at 90 degrees; matches no transition."""
    return _frame(
        [(0.4, 0.2), (0.4, 0.5), (0.4, 0.7), (0.2, 0.7)],
        [(0.6, 0.2), (0.6, 0.5), (0.6, 0.7), (0.8, 0.7)],
    )
