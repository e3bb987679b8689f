# Data models
from .data_models import (
    Challenge,
    ChallengeType,
    DEFAULT_CHALLENGES,
    FrameFeatures,
    HeadPose,
    HoldStep,
    ImageQuality,
    NoFacePolicy,
    SessionPhase,
    SessionSnapshot,
)

__all__ = [
    'Challenge', 'ChallengeType', 'DEFAULT_CHALLENGES', 'FrameFeatures', 'HeadPose',
    'HoldStep', 'ImageQuality', 'NoFacePolicy', 'SessionPhase', 'SessionSnapshot',
]
