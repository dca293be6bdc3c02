"""
Tests for Camera Module
========================
"""

import pytest
import numpy as np
import sys
from pathlib import Path
from unittest.mock import patch, MagicMock

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from eldritch_shield.capture.camera import Camera, CameraConfig, Frame


class TestCameraConfig:
    """Test suite for CameraConfig."""

    def test_default_values(self):
        config = CameraConfig()

        assert config.device_id == 0
        assert config.width == 1280
        assert config.height == 720
        assert config.fps == 30
        assert config.buffer_size == 1
        assert config.threaded

    def test_from_dict_partial(self):
        config = CameraConfig.from_dict({"device_id": 2, "threaded": False})

        assert config.device_id == 2
        assert not config.threaded
        assert config.width == 1280  # Default


class TestFrame:
    """Test suite for Frame class."""

    def test_rgb_conversion(self):
        """Blue in BGR is blue in the last RGB channel."""
        image = np.zeros((1, 1, 3), dtype=np.uint8)
        image[0, 0] = [255, 0, 0]

        rgb = Frame(image=image, timestamp=0, frame_number=0).rgb

        assert list(rgb[0, 0]) == [0, 0, 255]

    def test_timestamp_ms(self):
        frame = Frame(image=np.zeros((2, 2, 3), dtype=np.uint8), timestamp=12.3456, frame_number=1)

        assert frame.timestamp_ms == 12345


class TestCamera:
    """Test suite for Camera class."""

    @pytest.fixture
    def mock_cv2(self):
        """Mock OpenCV VideoCapture."""
        with patch("eldritch_shield.capture.camera.cv2") as mock:
            mock_cap = MagicMock()
            mock_cap.isOpened.return_value = True
            mock_cap.read.return_value = (True, np.zeros((720, 1280, 3), dtype=np.uint8))
            mock.VideoCapture.return_value = mock_cap
            yield mock

    def test_camera_init(self):
        camera = Camera(CameraConfig(device_id=0))

        assert camera.config.device_id == 0
        assert not camera.is_running
        assert camera.read() is None

    def test_start_success(self, mock_cv2):
        camera = Camera(CameraConfig(warmup_frames=0, threaded=False))

        assert camera.start() is True
        assert camera.is_running
        mock_cv2.VideoCapture.assert_called_once_with(0)

        camera.stop()

    def test_start_failure(self, mock_cv2):
        mock_cv2.VideoCapture.return_value.isOpened.return_value = False
        camera = Camera(CameraConfig(warmup_frames=0, threaded=False))

        assert camera.start() is False
        assert not camera.is_running

    def test_warmup_frames_discarded(self, mock_cv2):
        camera = Camera(CameraConfig(warmup_frames=3, threaded=False))

        camera.start()

        assert mock_cv2.VideoCapture.return_value.read.call_count == 3
        camera.stop()

    def test_unthreaded_read_numbers_frames(self, mock_cv2):
        camera = Camera(CameraConfig(warmup_frames=0, threaded=False))
        camera.start()

        first = camera.read()
        second = camera.read()

        assert first.frame_number == 1
        assert second.frame_number == 2
        camera.stop()

    def test_failed_read_returns_none(self, mock_cv2):
        mock_cv2.VideoCapture.return_value.read.return_value = (False, None)
        camera = Camera(CameraConfig(warmup_frames=0, threaded=False))
        camera.start()

        assert camera.read() is None
        camera.stop()

    def test_resolution_property(self):
        camera = Camera(CameraConfig(width=800, height=600))

        assert camera.resolution == (800, 600)

    def test_context_manager(self, mock_cv2):
        config = CameraConfig(warmup_frames=0, threaded=False)

        with Camera(config) as camera:
            assert camera.is_running

        assert not camera.is_running
        mock_cv2.VideoCapture.return_value.release.assert_called_once()


class TestCameraIntegration:
    """Integration tests requiring real camera (marked as slow)."""

    @pytest.mark.skip(reason="Requires physical camera")
    def test_real_camera_capture(self):
        camera = Camera(CameraConfig(warmup_frames=5))

        try:
            if camera.start():
                frame = camera.read()

                assert frame is not None
                assert frame.image.shape[0] > 0
        finally:
            camera.stop()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
