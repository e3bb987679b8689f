"""
Challenge Sequencer driving a liveness session through its ordered challenges
"""
import logging
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

from ..config import config
from ..models.data_models import (
    Challenge,
    DEFAULT_CHALLENGES,
    NoFacePolicy,
    SessionPhase,
    SessionSnapshot,
)
from .gesture_classifiers import detector_for, is_gesture_active
from .hold_accumulator import advance_hold, decay_hold, hold_progress

logger = logging.getLogger(__name__)


ChallengeCompleteCallback = Callable[[int, str], None]


class ChallengeSequencer:
    """
    State machine for one verification attempt.

    IDLE --start--> ACTIVE(0) --...--> ACTIVE(N-1) --> COMPLETE

    Each incoming frame is classified against the current challenge only and
    fed into the hold/decay accumulator. When the hold completes, the
    challenge is recorded and the sequencer moves to the next index, or to
    COMPLETE after the last one. Indices never skip or move backwards.
    ``reset()`` returns to IDLE from any state.

    The sequencer is the sole owner of the session state and is meant to be
    driven from a single frame callback.
    """

    def __init__(
        self,
        challenges: Optional[Iterable[Challenge]] = None,
        hold_threshold: Optional[int] = None,
        hold_decay: Optional[int] = None,
        no_face_policy: Optional[NoFacePolicy] = None,
        on_challenge_complete: Optional[ChallengeCompleteCallback] = None,
    ):
        """
        Initialize the sequencer in the IDLE state.

        Args:
            challenges: Ordered challenges for the session (defaults to the
                        five built-in challenges)
            hold_threshold: Frames a gesture must be held (defaults to config)
            hold_decay: Counter decrement on an inactive frame (defaults to config)
            no_face_policy: What a frame without a face does to the counter
                            (defaults to config, FREEZE unless overridden)
            on_challenge_complete: Optional callback fired once per completed
                                   challenge with (index, label)

        Raises:
            ValueError: On an empty challenge list, duplicate challenge ids,
                        a challenge type without a detector or a threshold below 1
        """
        self._challenges: Tuple[Challenge, ...] = tuple(
            DEFAULT_CHALLENGES if challenges is None else challenges
        )
        self._validate_challenges(self._challenges)

        self.hold_threshold = config.HOLD_THRESHOLD if hold_threshold is None else hold_threshold
        self.hold_decay = config.HOLD_DECAY if hold_decay is None else hold_decay
        if self.hold_threshold < 1:
            raise ValueError(f"Hold threshold must be at least 1, got {self.hold_threshold}")
        if self.hold_decay < 0:
            raise ValueError(f"Hold decay cannot be negative, got {self.hold_decay}")

        self.no_face_policy = (
            config.no_face_policy() if no_face_policy is None else NoFacePolicy(no_face_policy)
        )

        self._listeners: List[ChallengeCompleteCallback] = []
        if on_challenge_complete is not None:
            self.add_listener(on_challenge_complete)

        self._clear()

    @staticmethod
    def _validate_challenges(challenges: Tuple[Challenge, ...]) -> None:
        if not challenges:
            raise ValueError("A verification session needs at least one challenge")

        seen = set()
        for challenge in challenges:
            if challenge.challenge_id in seen:
                raise ValueError(f"Duplicate challenge id '{challenge.challenge_id}'")
            seen.add(challenge.challenge_id)
            try:
                detector_for(challenge.type)
            except KeyError:
                raise ValueError(
                    f"Challenge '{challenge.challenge_id}' has no detector for type {challenge.type!r}"
                )

    def _clear(self) -> None:
        self._is_verifying = False
        self._current_index = 0
        self._completed_ids: List[str] = []
        self._hold_counter = 0
        self._is_complete = False

    # ------------------------------------------------------------------
    # Read accessors
    # ------------------------------------------------------------------

    @property
    def challenges(self) -> Tuple[Challenge, ...]:
        return self._challenges

    @property
    def is_verifying(self) -> bool:
        return self._is_verifying

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_challenge(self) -> Challenge:
        return self._challenges[self._current_index]

    @property
    def completed_ids(self) -> Tuple[str, ...]:
        return tuple(self._completed_ids)

    @property
    def hold_counter(self) -> int:
        return self._hold_counter

    @property
    def hold_progress_percent(self) -> float:
        return hold_progress(self._hold_counter, self.hold_threshold)

    @property
    def is_complete(self) -> bool:
        return self._is_complete

    @property
    def phase(self) -> SessionPhase:
        if self._is_complete:
            return SessionPhase.COMPLETE
        if self._is_verifying:
            return SessionPhase.ACTIVE
        return SessionPhase.IDLE

    def snapshot(self) -> SessionSnapshot:
        """Read-only view of the current session state"""
        return SessionSnapshot(
            phase=self.phase,
            is_verifying=self._is_verifying,
            current_challenge_index=self._current_index,
            current_challenge=self.current_challenge,
            total_challenges=len(self._challenges),
            completed_challenge_ids=self.completed_ids,
            hold_counter=self._hold_counter,
            hold_progress_percent=self.hold_progress_percent,
            is_all_complete=self._is_complete,
        )

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_listener(self, callback: ChallengeCompleteCallback) -> None:
        """Register a callback fired with (index, label) on each completion"""
        self._listeners.append(callback)

    def remove_listener(self, callback: ChallengeCompleteCallback) -> None:
        self._listeners.remove(callback)

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def start(self) -> SessionSnapshot:
        """
        Begin verification at the first challenge.

        Calling start while already verifying restarts the session from
        scratch, the same as reset() followed by start().
        """
        if self._is_verifying:
            logger.info("Restarting verification session")
        self._clear()
        self._is_verifying = True
        logger.info(
            f"Verification started: {len(self._challenges)} challenges, "
            f"hold_threshold={self.hold_threshold}, first='{self.current_challenge.challenge_id}'"
        )
        return self.snapshot()

    def reset(self) -> SessionSnapshot:
        """Return to IDLE with every session field cleared"""
        if self._is_verifying or self._completed_ids or self._hold_counter:
            logger.info(
                f"Verification reset at index {self._current_index} "
                f"({len(self._completed_ids)} completed, hold={self._hold_counter})"
            )
        self._clear()
        return self.snapshot()

    def stop(self) -> SessionSnapshot:
        """
        Halt processing without discarding completed challenges.

        The hold counter is cleared; frames delivered after stop are ignored.
        A later start() begins a fresh session.
        """
        if self._is_verifying:
            logger.info(
                f"Verification stopped at index {self._current_index} "
                f"({len(self._completed_ids)} completed)"
            )
        self._is_verifying = False
        self._hold_counter = 0
        return self.snapshot()

    # ------------------------------------------------------------------
    # Frame processing
    # ------------------------------------------------------------------

    def process_frame(self, landmarks: Optional[Sequence]) -> SessionSnapshot:
        """
        Advance the session by one video frame.

        Args:
            landmarks: Landmark set of the detected face, or None / empty when
                       no face was found in the frame

        Returns:
            SessionSnapshot: State after this frame
        """
        if not self._is_verifying:
            return self.snapshot()

        if landmarks is None or len(landmarks) == 0:
            self._handle_no_face()
            return self.snapshot()

        challenge = self.current_challenge
        active = is_gesture_active(challenge.type, landmarks)
        step = advance_hold(
            self._hold_counter,
            active,
            self.hold_threshold,
            decay=self.hold_decay,
        )
        self._hold_counter = step.counter

        logger.debug(
            f"Challenge {self._current_index} '{challenge.challenge_id}': "
            f"active={active}, hold={self._hold_counter}/{self.hold_threshold}"
        )

        if step.completed:
            self._complete_current()

        return self.snapshot()

    def _handle_no_face(self) -> None:
        if self.no_face_policy == NoFacePolicy.DECAY:
            step = decay_hold(self._hold_counter, self.hold_threshold, decay=self.hold_decay)
            self._hold_counter = step.counter
            logger.debug(f"No face in frame, hold decayed to {self._hold_counter}")
        else:
            logger.debug(f"No face in frame, hold frozen at {self._hold_counter}")

    def _complete_current(self) -> None:
        index = self._current_index
        challenge = self._challenges[index]

        self._completed_ids.append(challenge.challenge_id)
        self._hold_counter = 0
        logger.info(f"Challenge {index} '{challenge.challenge_id}' completed")

        if index + 1 < len(self._challenges):
            self._current_index = index + 1
            logger.info(
                f"Next challenge {self._current_index}: '{self.current_challenge.challenge_id}'"
            )
        else:
            self._is_complete = True
            self._is_verifying = False
            logger.info("All challenges completed: liveness verified")

        for callback in list(self._listeners):
            callback(index, challenge.label)
