"""
Geometric feature extraction from MediaPipe face mesh landmarks
"""
import logging
from typing import Optional, Sequence

import numpy as np

from ..models.data_models import FrameFeatures, HeadPose

logger = logging.getLogger(__name__)


# Key landmark indices (MediaPipe FaceMesh topology)
NOSE_TIP = 1
FOREHEAD = 10
UPPER_LIP = 13
LOWER_LIP = 14
LEFT_EYE_OUTER = 33
LEFT_MOUTH = 61
LEFT_EYE_BOTTOM = 145
CHIN = 152
LEFT_EYE_TOP = 159
LEFT_CHEEK = 234
RIGHT_EYE_OUTER = 263
RIGHT_MOUTH = 291
RIGHT_EYE_BOTTOM = 374
RIGHT_EYE_TOP = 386
RIGHT_CHEEK = 454


def landmark_point(landmarks: Sequence, index: int) -> Optional[np.ndarray]:
    """
    Read the (x, y) position of one landmark.

    Accepts MediaPipe landmark objects (anything with ``.x``/``.y``),
    plain (x, y[, z]) sequences and rows of an (N, 2|3) numpy array.

    Returns:
        np.ndarray of shape (2,), or None when the index is absent,
        the entry is None, or a coordinate is not a finite number
    """
    if landmarks is None or index < 0 or index >= len(landmarks):
        return None

    landmark = landmarks[index]
    if landmark is None:
        return None

    if hasattr(landmark, 'x') and hasattr(landmark, 'y'):
        x, y = landmark.x, landmark.y
    else:
        try:
            x, y = landmark[0], landmark[1]
        except (TypeError, IndexError):
            return None

    try:
        point = np.array([x, y], dtype=float)
    except (TypeError, ValueError):
        return None

    if not np.all(np.isfinite(point)):
        return None
    return point


def _points(landmarks: Sequence, *indices: int) -> Optional[list]:
    points = []
    for index in indices:
        point = landmark_point(landmarks, index)
        if point is None:
            logger.debug(f"Landmark {index} unavailable")
            return None
        points.append(point)
    return points


def mouth_aspect_ratio(landmarks: Sequence) -> Optional[float]:
    """
    Mouth width (corner to corner) over lip gap (upper to lower lip center).

    A stretched mouth with touching lips gives ``inf``.
    """
    points = _points(landmarks, LEFT_MOUTH, RIGHT_MOUTH, UPPER_LIP, LOWER_LIP)
    if points is None:
        return None
    left_mouth, right_mouth, upper_lip, lower_lip = points

    mouth_width = float(np.linalg.norm(right_mouth - left_mouth))
    mouth_height = float(np.linalg.norm(lower_lip - upper_lip))

    if mouth_height == 0.0:
        return float('inf') if mouth_width > 0.0 else None
    return mouth_width / mouth_height


def eye_openness(landmarks: Sequence) -> Optional[float]:
    """Average vertical lid distance of the left and right eye"""
    points = _points(
        landmarks,
        LEFT_EYE_TOP, LEFT_EYE_BOTTOM,
        RIGHT_EYE_TOP, RIGHT_EYE_BOTTOM,
    )
    if points is None:
        return None
    left_top, left_bottom, right_top, right_bottom = points

    left_height = abs(left_top[1] - left_bottom[1])
    right_height = abs(right_top[1] - right_bottom[1])
    return float((left_height + right_height) / 2.0)


def nose_offset(landmarks: Sequence) -> Optional[float]:
    """
    Horizontal offset of the nose tip from the midpoint between the cheeks.

    Measured in raw camera coordinates: positive when the user turns to
    their own left (nose moves toward image right), negative when they turn
    to their right. The magnitude grows with the amount of yaw.
    """
    points = _points(landmarks, NOSE_TIP, LEFT_CHEEK, RIGHT_CHEEK)
    if points is None:
        return None
    nose, left_cheek, right_cheek = points

    face_center_x = (left_cheek[0] + right_cheek[0]) / 2.0
    return float(nose[0] - face_center_x)


def mouth_opening_height(landmarks: Sequence) -> Optional[float]:
    """Vertical gap between upper and lower lip centers"""
    points = _points(landmarks, UPPER_LIP, LOWER_LIP)
    if points is None:
        return None
    upper_lip, lower_lip = points
    return float(abs(lower_lip[1] - upper_lip[1]))


def head_pose(landmarks: Sequence) -> Optional[HeadPose]:
    """
    Estimate head yaw and pitch from nose, eye corners, chin and forehead.

    Yaw is the nose offset from the eye center normalized by eye distance,
    pitch the vertical offset normalized by face height, both scaled to
    roughly degrees. These are proxies, not calibrated angles.
    """
    points = _points(
        landmarks, NOSE_TIP, LEFT_EYE_OUTER, RIGHT_EYE_OUTER, CHIN, FOREHEAD
    )
    if points is None:
        return None
    nose, left_eye, right_eye, chin, forehead = points

    eye_center = (left_eye + right_eye) / 2.0
    eye_width = float(np.linalg.norm(right_eye - left_eye))
    face_height = float(np.linalg.norm(chin - forehead))
    if eye_width == 0.0 or face_height == 0.0:
        return None

    yaw = (nose[0] - eye_center[0]) / eye_width * 90.0
    pitch = (nose[1] - eye_center[1]) / face_height * 90.0
    return HeadPose(yaw=float(yaw), pitch=float(pitch))


def extract_features(landmarks: Sequence) -> FrameFeatures:
    """Compute every geometric feature for one landmark set"""
    return FrameFeatures(
        mouth_aspect_ratio=mouth_aspect_ratio(landmarks),
        eye_openness=eye_openness(landmarks),
        nose_offset=nose_offset(landmarks),
        mouth_opening_height=mouth_opening_height(landmarks),
        head_pose=head_pose(landmarks),
    )
