"""
Unit tests for FaceTracker
"""
from types import SimpleNamespace

import numpy as np
import pytest

from livecheck.services import face_tracker as face_tracker_module
from livecheck.services.face_tracker import FaceTracker, LandmarkModelError, download_model
from livecheck.services.gesture_classifiers import detect_turn_left, detect_turn_right
from conftest import make_landmarks


class TestFaceTrackerInitialization:
    """Test FaceTracker initialization and configuration"""

    def test_initialization_is_lazy(self):
        tracker = FaceTracker(model_path="/path/to/model.task", min_confidence=0.3)

        assert tracker.model_path == "/path/to/model.task"
        assert tracker.min_confidence == 0.3
        assert tracker._face_landmarker is None

    def test_missing_model_path_raises(self):
        tracker = FaceTracker(model_path="")

        with pytest.raises(LandmarkModelError, match="Model path must be provided"):
            _ = tracker.face_landmarker

    def test_nonexistent_model_file_raises(self, tmp_path):
        tracker = FaceTracker(model_path=str(tmp_path / "missing.task"))

        with pytest.raises(LandmarkModelError, match="not found"):
            _ = tracker.face_landmarker

    def test_load_failure_is_wrapped(self, tmp_path, mocker):
        model = tmp_path / "broken.task"
        model.write_bytes(b"not a model")
        mocker.patch.object(
            face_tracker_module.mp.tasks.vision.FaceLandmarker,
            "create_from_options",
            side_effect=RuntimeError("bad flatbuffer"),
        )
        tracker = FaceTracker(model_path=str(model))

        with pytest.raises(LandmarkModelError, match="bad flatbuffer"):
            _ = tracker.face_landmarker

    def test_model_error_is_runtime_error(self):
        assert issubclass(LandmarkModelError, RuntimeError)


class TestFramePreprocessing:
    """Test frame preprocessing functionality"""

    def test_resizes_to_target(self):
        tracker = FaceTracker()
        frame = np.random.randint(0, 255, (720, 1280, 3), dtype=np.uint8)

        processed = tracker.preprocess_frame(frame, target_size=(640, 480))

        assert processed.shape == (480, 640, 3)
        assert processed.dtype == np.uint8

    def test_keeps_size_without_target(self):
        tracker = FaceTracker()
        frame = np.zeros((240, 320, 3), dtype=np.uint8)

        assert tracker.preprocess_frame(frame).shape == (240, 320, 3)

    def test_converts_bgr_to_rgb(self):
        tracker = FaceTracker()
        bgr_frame = np.zeros((48, 64, 3), dtype=np.uint8)
        bgr_frame[:, :, 0] = 255  # Blue channel in BGR

        rgb_frame = tracker.preprocess_frame(bgr_frame)

        assert rgb_frame[0, 0, 0] == 0
        assert rgb_frame[0, 0, 1] == 0
        assert rgb_frame[0, 0, 2] == 255

    def test_never_flips_horizontally(self):
        tracker = FaceTracker()
        frame = np.zeros((10, 20, 3), dtype=np.uint8)
        frame[:, 0, :] = 255  # Left column white

        processed = tracker.preprocess_frame(frame)

        assert processed[0, 0, 0] == 255
        assert processed[0, -1, 0] == 0


class TestLandmarkDetection:
    """Test landmark extraction with a mocked MediaPipe landmarker"""

    def _tracker_with_result(self, mocker, face_landmarks):
        tracker = FaceTracker(model_path="dummy_path.task")
        mock_landmarker = mocker.MagicMock()
        mock_landmarker.detect.return_value = SimpleNamespace(face_landmarks=face_landmarks)
        tracker._face_landmarker = mock_landmarker
        return tracker, mock_landmarker

    def test_returns_none_without_face(self, mocker):
        tracker, landmarker = self._tracker_with_result(mocker, [])
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        assert tracker.detect_landmarks(frame) is None
        landmarker.detect.assert_called_once()

    def test_returns_landmark_array(self, mocker):
        face = [SimpleNamespace(x=0.1 * i, y=0.2, z=-0.01) for i in range(478)]
        tracker, _ = self._tracker_with_result(mocker, [face])
        frame = np.zeros((480, 640, 3), dtype=np.uint8)

        landmarks = tracker.detect_landmarks(frame)

        assert landmarks.shape == (478, 3)
        assert landmarks[3].tolist() == pytest.approx([0.3, 0.2, -0.01])

    def test_uses_first_face_only(self, mocker):
        first = [SimpleNamespace(x=0.1, y=0.1, z=0.0)] * 468
        second = [SimpleNamespace(x=0.9, y=0.9, z=0.0)] * 468
        tracker, _ = self._tracker_with_result(mocker, [first, second])

        landmarks = tracker.detect_landmarks(np.zeros((48, 64, 3), dtype=np.uint8))

        assert landmarks[0, 0] == pytest.approx(0.1)

    def test_user_turning_left_is_detected_as_turn_left(self, mocker):
        # Raw camera frame: turning to their own left moves the user's nose
        # toward image right, marked here by a bright column at x=0.56
        width = 100
        frame = np.zeros((10, width, 3), dtype=np.uint8)
        frame[:, 56, :] = 255

        def fake_detect(mp_image):
            image = np.asarray(mp_image.numpy_view())
            nose_x = int(np.argmax(image[0, :, 0])) / width
            points = make_landmarks({1: (nose_x, 0.55)})
            face = [SimpleNamespace(x=x, y=y, z=z) for x, y, z in points]
            return SimpleNamespace(face_landmarks=[face])

        tracker = FaceTracker(model_path="dummy_path.task")
        tracker._face_landmarker = mocker.MagicMock()
        tracker._face_landmarker.detect.side_effect = fake_detect

        landmarks = tracker.detect_landmarks(frame)

        assert landmarks[1, 0] == pytest.approx(0.56)
        assert detect_turn_left(landmarks) is True
        assert detect_turn_right(landmarks) is False

    def test_close_releases_landmarker(self, mocker):
        tracker, landmarker = self._tracker_with_result(mocker, [])

        with tracker:
            pass

        landmarker.close.assert_called_once()
        assert tracker._face_landmarker is None

    def test_close_without_initialization(self):
        tracker = FaceTracker()
        tracker.close()
        assert tracker._face_landmarker is None


class TestDownloadModel:
    """Test model download helper"""

    def test_existing_model_is_not_downloaded(self, tmp_path, mocker):
        model = tmp_path / "face_landmarker.task"
        model.write_bytes(b"model")
        retrieve = mocker.patch.object(face_tracker_module.urllib.request, "urlretrieve")

        assert download_model(str(model), "https://example.invalid/model") == model
        retrieve.assert_not_called()

    def test_downloads_into_new_directory(self, tmp_path, mocker):
        model = tmp_path / "models" / "face_landmarker.task"

        def fake_retrieve(url, path):
            path.write_bytes(b"model bytes")

        mocker.patch.object(face_tracker_module.urllib.request, "urlretrieve", side_effect=fake_retrieve)

        assert download_model(str(model), "https://example.invalid/model") == model
        assert model.read_bytes() == b"model bytes"

    def test_failed_download_removes_partial_file(self, tmp_path, mocker):
        model = tmp_path / "face_landmarker.task"

        def failing_retrieve(url, path):
            path.write_bytes(b"partial")
            raise OSError("connection reset")

        mocker.patch.object(face_tracker_module.urllib.request, "urlretrieve", side_effect=failing_retrieve)

        with pytest.raises(LandmarkModelError, match="connection reset"):
            download_model(str(model), "https://example.invalid/model")
        assert not model.exists()
