"""
Command line entry point: run a live verification session from a webcam
"""
import argparse
import logging
import sys
from typing import Optional

import cv2
import numpy as np

from .config import config
from .models.data_models import ImageQuality, SessionPhase, SessionSnapshot
from .services.challenge_sequencer import ChallengeSequencer
from .services.face_tracker import FaceTracker, LandmarkModelError, download_model
from .services.image_quality import assess_quality

logger = logging.getLogger(__name__)

WINDOW_NAME = "livecheck"


class CameraError(RuntimeError):
    """The camera could not be opened or stopped delivering frames"""


def status_text(snapshot: SessionSnapshot) -> str:
    """One-line instruction for the current session state"""
    if snapshot.phase == SessionPhase.COMPLETE:
        return "Verified!"
    if snapshot.phase == SessionPhase.ACTIVE:
        challenge = snapshot.current_challenge
        return (
            f"{snapshot.current_challenge_index + 1}/{snapshot.total_challenges} "
            f"{challenge.label}: {challenge.instruction}"
        )
    return "Press 's' to start"


def draw_overlay(
    frame: np.ndarray,
    landmarks: Optional[np.ndarray],
    snapshot: SessionSnapshot,
    quality: Optional[ImageQuality] = None,
    mirror: bool = False,
) -> np.ndarray:
    """
    Draw the face mesh, current instruction and hold progress onto a frame.

    Landmarks are in raw camera orientation. Pass mirror=True when the frame
    has been flipped for a front camera preview so the mesh is flipped with it.
    """
    height, width = frame.shape[:2]

    if landmarks is not None and len(landmarks) > 0:
        count = len(landmarks)
        # Cyan to green across the mesh; OpenCV hue runs 0-180
        hues = ((np.arange(count) / count * 60 + 150) / 2).astype(np.uint8)
        full = np.full(count, 255, dtype=np.uint8)
        hsv = np.stack([hues, full, full], axis=-1)[np.newaxis]
        colors = cv2.cvtColor(hsv, cv2.COLOR_HSV2BGR)[0]
        for point, color in zip(landmarks, colors):
            x = 1.0 - point[0] if mirror else point[0]
            center = (int(x * width), int(point[1] * height))
            cv2.circle(frame, center, 1, tuple(int(c) for c in color), -1)

    cv2.putText(
        frame, status_text(snapshot), (10, 30),
        cv2.FONT_HERSHEY_SIMPLEX, 0.7, (255, 255, 255), 2,
    )

    bar_width = int((width - 20) * snapshot.hold_progress_percent / 100.0)
    cv2.rectangle(frame, (10, height - 30), (width - 10, height - 15), (80, 80, 80), 1)
    if bar_width > 0:
        cv2.rectangle(frame, (10, height - 30), (10 + bar_width, height - 15), (0, 200, 0), -1)

    if quality is not None:
        cv2.putText(
            frame, f"clarity {quality.clarity}", (10, 60),
            cv2.FONT_HERSHEY_SIMPLEX, 0.5, (200, 200, 200), 1,
        )

    return frame


def run_session(camera_index: int, tracker: FaceTracker, sequencer: ChallengeSequencer) -> bool:
    """
    Drive a verification session from a webcam until verified or quit.

    Keys: 's' (re)starts, 'r' resets, 'q' quits.

    Returns:
        bool: True if every challenge was completed

    Raises:
        CameraError: if the camera cannot be opened or stops delivering frames
        LandmarkModelError: if the face landmark model cannot be loaded
    """
    capture = cv2.VideoCapture(camera_index)
    if not capture.isOpened():
        raise CameraError(f"Could not open camera {camera_index}")

    capture.set(cv2.CAP_PROP_FRAME_WIDTH, config.FRAME_WIDTH)
    capture.set(cv2.CAP_PROP_FRAME_HEIGHT, config.FRAME_HEIGHT)

    sequencer.add_listener(
        lambda index, label: logger.info(f"Completed challenge {index + 1}: {label}")
    )
    sequencer.start()

    try:
        while True:
            ok, frame = capture.read()
            if not ok:
                raise CameraError("Camera stopped delivering frames")

            landmarks = tracker.detect_landmarks(frame)
            snapshot = sequencer.process_frame(landmarks)

            display = cv2.flip(frame, 1) if config.MIRROR else frame.copy()
            draw_overlay(display, landmarks, snapshot, assess_quality(frame), mirror=config.MIRROR)
            cv2.imshow(WINDOW_NAME, display)

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q'):
                break
            if key == ord('r'):
                sequencer.reset()
            elif key == ord('s'):
                sequencer.start()

            if snapshot.is_all_complete:
                cv2.waitKey(1500)
                break
    finally:
        capture.release()
        cv2.destroyAllWindows()

    return sequencer.is_complete


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="livecheck", description="Facial liveness challenge check")
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Run a verification session from a webcam")
    run.add_argument("--camera", type=int, default=config.CAMERA_INDEX, help="OpenCV camera index")
    run.add_argument("--model", default=config.MEDIAPIPE_MODEL_PATH, help="Face landmarker model path")
    run.add_argument("--hold", type=int, default=config.HOLD_THRESHOLD, help="Frames to hold each gesture")

    download = subparsers.add_parser("download-model", help="Download the face landmarker model")
    download.add_argument("--model", default=config.MEDIAPIPE_MODEL_PATH, help="Destination path")
    download.add_argument("--url", default=config.MEDIAPIPE_MODEL_URL, help="Model URL")

    return parser


def main(argv=None) -> int:
    """Entry point for the ``livecheck`` console script"""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    )
    args = build_parser().parse_args(argv)

    if args.command == "download-model":
        try:
            path = download_model(args.model, args.url)
        except LandmarkModelError as e:
            logger.error(str(e))
            return 1
        print(f"Model ready at {path}")
        return 0

    try:
        with FaceTracker(model_path=args.model) as tracker:
            sequencer = ChallengeSequencer(hold_threshold=args.hold)
            verified = run_session(args.camera, tracker, sequencer)
    except (CameraError, LandmarkModelError) as e:
        logger.error(f"Verification aborted: {e}")
        return 2

    print("Liveness verified" if verified else "Liveness not verified")
    return 0 if verified else 1


if __name__ == '__main__':
    sys.exit(main())
