"""
Data models for the liveness challenge sequence
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ChallengeType(str, Enum):
    """Facial gestures a user can be asked to perform"""
    SMILE = "smile"
    BLINK = "blink"
    TURN_LEFT = "turnLeft"
    TURN_RIGHT = "turnRight"
    OPEN_MOUTH = "openMouth"


class SessionPhase(str, Enum):
    """Coarse state of a verification session"""
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"


class NoFacePolicy(str, Enum):
    """What a frame without a detected face does to the hold counter"""
    FREEZE = "freeze"
    DECAY = "decay"


@dataclass(frozen=True)
class Challenge:
    """One required gesture in the ordered liveness sequence"""
    challenge_id: str
    type: ChallengeType
    label: str
    instruction: str
    tip: str = ""


DEFAULT_CHALLENGES: Tuple[Challenge, ...] = (
    Challenge(
        challenge_id="smile",
        type=ChallengeType.SMILE,
        label="Smile",
        instruction="Show us that smile!",
        tip="Flash those teeth",
    ),
    Challenge(
        challenge_id="blink",
        type=ChallengeType.BLINK,
        label="Blink",
        instruction="Close your eyes",
        tip="Close both eyes completely",
    ),
    Challenge(
        challenge_id="turnLeft",
        type=ChallengeType.TURN_LEFT,
        label="Left",
        instruction="Look to your left",
        tip="Turn about 30 degrees",
    ),
    Challenge(
        challenge_id="turnRight",
        type=ChallengeType.TURN_RIGHT,
        label="Right",
        instruction="Look to your right",
        tip="Turn about 30 degrees",
    ),
    Challenge(
        challenge_id="openMouth",
        type=ChallengeType.OPEN_MOUTH,
        label="Surprise",
        instruction="Show us surprised!",
        tip="Open wide like 'Woah!'",
    ),
)


@dataclass(frozen=True)
class HoldStep:
    """Result of feeding one frame into the hold/decay accumulator"""
    counter: int
    progress_percent: float
    completed: bool


@dataclass(frozen=True)
class HeadPose:
    """Approximate head rotation in degrees (normalized-coordinate proxy)"""
    yaw: float
    pitch: float


@dataclass(frozen=True)
class FrameFeatures:
    """All geometric measurements for one landmark set; None means unavailable"""
    mouth_aspect_ratio: Optional[float] = None
    eye_openness: Optional[float] = None
    nose_offset: Optional[float] = None
    mouth_opening_height: Optional[float] = None
    head_pose: Optional[HeadPose] = None


@dataclass(frozen=True)
class ImageQuality:
    """Frame quality scores, each 0-100"""
    lighting: float
    sharpness: float
    contrast: float
    clarity: int


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of a verification session for the presentation layer"""
    phase: SessionPhase
    is_verifying: bool
    current_challenge_index: int
    current_challenge: Challenge
    total_challenges: int
    completed_challenge_ids: Tuple[str, ...] = field(default_factory=tuple)
    hold_counter: int = 0
    hold_progress_percent: float = 0.0
    is_all_complete: bool = False
