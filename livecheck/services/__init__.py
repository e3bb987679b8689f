# Service layer components
from .challenge_sequencer import ChallengeSequencer
from .face_tracker import FaceTracker, LandmarkModelError
from .gesture_classifiers import GESTURE_DETECTORS, is_gesture_active

__all__ = ['ChallengeSequencer', 'FaceTracker', 'LandmarkModelError', 'GESTURE_DETECTORS', 'is_gesture_active']
