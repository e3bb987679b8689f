"""
Configuration management for the liveness checker
"""
import os
from pathlib import Path
from dotenv import load_dotenv

from .models.data_models import NoFacePolicy

load_dotenv()


DEFAULT_MODEL_PATH = Path.home() / ".mediapipe_models" / "face_landmarker.task"
DEFAULT_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
    "face_landmarker/float16/latest/face_landmarker.task"
)


class Config:
    """Application configuration"""

    # Hold/decay accumulator
    HOLD_THRESHOLD = int(os.getenv('LIVECHECK_HOLD_THRESHOLD', '25'))
    HOLD_DECAY = int(os.getenv('LIVECHECK_HOLD_DECAY', '2'))
    NO_FACE_POLICY = os.getenv('LIVECHECK_NO_FACE_POLICY', 'freeze')

    # MediaPipe Face Landmarker
    MEDIAPIPE_MODEL_PATH = os.path.expanduser(os.getenv('MEDIAPIPE_MODEL_PATH', str(DEFAULT_MODEL_PATH)))
    MEDIAPIPE_MODEL_URL = os.getenv('MEDIAPIPE_MODEL_URL', DEFAULT_MODEL_URL)
    MIN_FACE_CONFIDENCE = float(os.getenv('LIVECHECK_MIN_FACE_CONFIDENCE', '0.5'))

    # Camera
    CAMERA_INDEX = int(os.getenv('LIVECHECK_CAMERA_INDEX', '0'))
    FRAME_WIDTH = int(os.getenv('LIVECHECK_FRAME_WIDTH', '640'))
    FRAME_HEIGHT = int(os.getenv('LIVECHECK_FRAME_HEIGHT', '480'))
    MIRROR = os.getenv('LIVECHECK_MIRROR', 'true').lower() == 'true'

    # Logging
    LOG_LEVEL = os.getenv('LIVECHECK_LOG_LEVEL', 'INFO').upper()

    @classmethod
    def no_face_policy(cls) -> NoFacePolicy:
        """Parse the configured no-face policy"""
        try:
            return NoFacePolicy(cls.NO_FACE_POLICY.strip().lower())
        except ValueError:
            raise ValueError(
                f"Unknown LIVECHECK_NO_FACE_POLICY '{cls.NO_FACE_POLICY}'. "
                f"Expected one of: {', '.join(p.value for p in NoFacePolicy)}"
            ) from None

    @classmethod
    def frame_size(cls) -> tuple:
        """Capture size as (width, height)"""
        return (cls.FRAME_WIDTH, cls.FRAME_HEIGHT)


config = Config()
