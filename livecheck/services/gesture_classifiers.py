"""
Per-frame gesture classifiers for each challenge type
"""
import logging
from typing import Callable, Dict, Sequence

from ..models.data_models import ChallengeType
from . import feature_extractor

logger = logging.getLogger(__name__)


# Empirically tuned against MediaPipe normalized coordinates
SMILE_RATIO_THRESHOLD = 3.5
BLINK_EYE_OPENNESS_THRESHOLD = 0.012
TURN_NOSE_OFFSET_THRESHOLD = 0.04
OPEN_MOUTH_HEIGHT_THRESHOLD = 0.035


def detect_smile(landmarks: Sequence) -> bool:
    """Mouth is much wider than it is open"""
    ratio = feature_extractor.mouth_aspect_ratio(landmarks)
    if ratio is None:
        return False
    return ratio > SMILE_RATIO_THRESHOLD


def detect_blink(landmarks: Sequence) -> bool:
    """Both eyelids nearly closed"""
    openness = feature_extractor.eye_openness(landmarks)
    if openness is None:
        return False
    return openness < BLINK_EYE_OPENNESS_THRESHOLD


def detect_turn_left(landmarks: Sequence) -> bool:
    """Nose tip well right of the cheek midpoint in the raw camera image (user turned to their left)"""
    offset = feature_extractor.nose_offset(landmarks)
    if offset is None:
        return False
    return offset > TURN_NOSE_OFFSET_THRESHOLD


def detect_turn_right(landmarks: Sequence) -> bool:
    """Nose tip well left of the cheek midpoint in the raw camera image (user turned to their right)"""
    offset = feature_extractor.nose_offset(landmarks)
    if offset is None:
        return False
    return offset < -TURN_NOSE_OFFSET_THRESHOLD


def detect_open_mouth(landmarks: Sequence) -> bool:
    """Lips pulled apart vertically"""
    height = feature_extractor.mouth_opening_height(landmarks)
    if height is None:
        return False
    return height > OPEN_MOUTH_HEIGHT_THRESHOLD


GestureDetector = Callable[[Sequence], bool]

GESTURE_DETECTORS: Dict[ChallengeType, GestureDetector] = {
    ChallengeType.SMILE: detect_smile,
    ChallengeType.BLINK: detect_blink,
    ChallengeType.TURN_LEFT: detect_turn_left,
    ChallengeType.TURN_RIGHT: detect_turn_right,
    ChallengeType.OPEN_MOUTH: detect_open_mouth,
}


def check_detector_coverage(detectors: Dict[ChallengeType, GestureDetector]) -> None:
    """
    Make sure every challenge type has exactly one detector.

    Raises:
        RuntimeError: if a challenge type has no detector or an unknown
                      key is present
    """
    missing = [t.value for t in ChallengeType if t not in detectors]
    unknown = [repr(k) for k in detectors if not isinstance(k, ChallengeType)]
    if missing or unknown:
        raise RuntimeError(
            f"Gesture detector table is incomplete: missing={missing}, unknown={unknown}"
        )


check_detector_coverage(GESTURE_DETECTORS)


def detector_for(challenge_type: ChallengeType) -> GestureDetector:
    """
    Look up the detector for a challenge type.

    Raises:
        KeyError: for values that are not a known challenge type
    """
    try:
        key = ChallengeType(challenge_type)
    except ValueError:
        raise KeyError(f"No gesture detector for {challenge_type!r}")
    return GESTURE_DETECTORS[key]


def is_gesture_active(challenge_type: ChallengeType, landmarks: Sequence) -> bool:
    """Evaluate only the detector for the given challenge type"""
    active = detector_for(challenge_type)(landmarks)
    logger.debug(f"{ChallengeType(challenge_type).value}: active={active}")
    return active
