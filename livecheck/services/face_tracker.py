"""
Face Tracker supplying per-frame face mesh landmarks from camera frames
"""
import logging
import os
import urllib.request
from pathlib import Path
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np

from ..config import config

logger = logging.getLogger(__name__)


class LandmarkModelError(RuntimeError):
    """The face landmark model could not be located, downloaded or loaded"""


class FaceTracker:
    """
    Extracts facial landmarks from video frames with MediaPipe Face Landmarker.

    Frames go in as raw (unmirrored) OpenCV BGR images, landmark sets come
    out as (N, 3) numpy arrays of normalized coordinates in the same raw
    orientation, or None when no face is found. Mirroring a front camera
    preview is a display concern and never applied before detection.
    """

    def __init__(
        self,
        model_path: Optional[str] = None,
        min_confidence: Optional[float] = None,
    ):
        """
        Initialize FaceTracker.

        The FaceLandmarker is created lazily on first use so the tracker can
        be constructed (and its preprocessing tested) without the model file.

        Args:
            model_path: Path to the face_landmarker.task model (defaults to config)
            min_confidence: Minimum face detection/presence confidence
        """
        self.model_path = config.MEDIAPIPE_MODEL_PATH if model_path is None else model_path
        self.min_confidence = (
            config.MIN_FACE_CONFIDENCE if min_confidence is None else min_confidence
        )
        self._face_landmarker = None

    @property
    def face_landmarker(self):
        """
        Lazy initialization of MediaPipe FaceLandmarker.

        Raises:
            LandmarkModelError: if the model path is unset, the file does not
                                exist or MediaPipe fails to load it
        """
        if self._face_landmarker is None:
            if not self.model_path:
                raise LandmarkModelError(
                    "Model path must be provided. Run: livecheck download-model"
                )
            if not os.path.exists(self.model_path):
                raise LandmarkModelError(
                    f"MediaPipe model not found at {self.model_path}. "
                    "Run: livecheck download-model"
                )

            try:
                base_options = mp.tasks.BaseOptions(model_asset_path=str(self.model_path))
                options = mp.tasks.vision.FaceLandmarkerOptions(
                    base_options=base_options,
                    running_mode=mp.tasks.vision.RunningMode.IMAGE,
                    num_faces=1,
                    min_face_detection_confidence=self.min_confidence,
                    min_face_presence_confidence=self.min_confidence,
                    output_face_blendshapes=False,
                    output_facial_transformation_matrixes=False,
                )
                self._face_landmarker = mp.tasks.vision.FaceLandmarker.create_from_options(options)
            except Exception as e:
                raise LandmarkModelError(f"Failed to load MediaPipe model: {e}") from e

            logger.info(f"MediaPipe FaceLandmarker loaded from {self.model_path}")

        return self._face_landmarker

    def preprocess_frame(self, frame: np.ndarray, target_size: Optional[tuple] = None) -> np.ndarray:
        """
        Prepare a BGR camera frame for MediaPipe.

        Steps:
        1. Resize to target size (width, height) when given
        2. Convert BGR (OpenCV default) to RGB (MediaPipe requirement)

        Args:
            frame: Input frame in BGR format
            target_size: Optional (width, height) to resize to

        Returns:
            np.ndarray: Preprocessed frame in RGB format
        """
        if target_size is not None:
            frame = cv2.resize(frame, target_size, interpolation=cv2.INTER_LINEAR)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def detect_landmarks(self, frame: np.ndarray, target_size: Optional[tuple] = None) -> Optional[np.ndarray]:
        """
        Detect the face mesh in one frame.

        Args:
            frame: Video frame in BGR format
            target_size: Optional (width, height) to resize to first

        Returns:
            np.ndarray of shape (N, 3) with normalized x, y, z per landmark,
            or None if no face was detected
        """
        landmarker = self.face_landmarker
        rgb_frame = self.preprocess_frame(frame, target_size)
        mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=np.ascontiguousarray(rgb_frame))

        detection_result = landmarker.detect(mp_image)
        if not detection_result.face_landmarks:
            return None

        landmarks = detection_result.face_landmarks[0]
        return np.array([[lm.x, lm.y, lm.z] for lm in landmarks], dtype=float)

    def close(self) -> None:
        """Release MediaPipe resources"""
        if self._face_landmarker is not None:
            self._face_landmarker.close()
            self._face_landmarker = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def download_model(model_path: Optional[str] = None, url: Optional[str] = None) -> Path:
    """
    Download the MediaPipe Face Landmarker model if it is not present.

    Args:
        model_path: Destination file (defaults to config)
        url: Source URL (defaults to config)

    Returns:
        Path: Location of the model file

    Raises:
        LandmarkModelError: if the download fails; a partial file is removed
    """
    path = Path(config.MEDIAPIPE_MODEL_PATH if model_path is None else model_path)
    url = config.MEDIAPIPE_MODEL_URL if url is None else url

    if path.exists():
        logger.info(f"Model already exists at {path} ({path.stat().st_size / 1024 / 1024:.2f} MB)")
        return path

    path.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Downloading MediaPipe Face Landmarker from {url} to {path}")

    try:
        urllib.request.urlretrieve(url, path)
    except Exception as e:
        if path.exists():
            path.unlink()
        raise LandmarkModelError(f"Model download failed: {e}") from e

    logger.info(f"Download complete ({path.stat().st_size / 1024 / 1024:.2f} MB)")
    return path
