"""
Shared fixtures: synthetic MediaPipe face mesh landmark sets
"""
import numpy as np
import pytest

from livecheck.models.data_models import ChallengeType

NUM_LANDMARKS = 468

# Neutral face: no gesture classifier fires
NEUTRAL_POINTS = {
    1: (0.50, 0.55),     # nose tip
    10: (0.50, 0.20),    # forehead
    13: (0.50, 0.685),   # upper lip center
    14: (0.50, 0.715),   # lower lip center
    33: (0.38, 0.40),    # left eye outer corner
    61: (0.45, 0.70),    # left mouth corner
    145: (0.40, 0.42),   # left eye bottom
    152: (0.50, 0.85),   # chin
    159: (0.40, 0.40),   # left eye top
    234: (0.30, 0.50),   # left cheek
    263: (0.62, 0.40),   # right eye outer corner
    291: (0.55, 0.70),   # right mouth corner
    374: (0.60, 0.42),   # right eye bottom
    386: (0.60, 0.40),   # right eye top
    454: (0.70, 0.50),   # right cheek
}

GESTURE_POINTS = {
    ChallengeType.SMILE: {
        61: (0.42, 0.70), 291: (0.58, 0.70),
        13: (0.50, 0.695), 14: (0.50, 0.705),
    },
    ChallengeType.BLINK: {
        159: (0.40, 0.410), 145: (0.40, 0.415),
        386: (0.60, 0.410), 374: (0.60, 0.415),
    },
    ChallengeType.TURN_LEFT: {1: (0.56, 0.55)},
    ChallengeType.TURN_RIGHT: {1: (0.44, 0.55)},
    ChallengeType.OPEN_MOUTH: {13: (0.50, 0.67), 14: (0.50, 0.73)},
}


def make_landmarks(overrides=None, count=NUM_LANDMARKS):
    """Build an (count, 3) landmark array for a neutral face with overrides"""
    landmarks = np.full((count, 3), 0.5, dtype=float)
    landmarks[:, 2] = 0.0
    points = dict(NEUTRAL_POINTS)
    points.update(overrides or {})
    for index, (x, y) in points.items():
        if index < count:
            landmarks[index, 0] = x
            landmarks[index, 1] = y
    return landmarks


def gesture_landmarks(challenge_type):
    """Landmark set on which only the given gesture is detected"""
    return make_landmarks(GESTURE_POINTS[ChallengeType(challenge_type)])


@pytest.fixture
def neutral_landmarks():
    return make_landmarks()


@pytest.fixture
def smile_landmarks():
    return gesture_landmarks(ChallengeType.SMILE)
