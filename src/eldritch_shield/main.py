"""
Eldritch Shield - Main Application
===================================

Opens the webcam, tracks one hand in a background thread and draws the
particle shield over the mirrored feed while the palm is open.
"""

import argparse
import logging
import signal
from dataclasses import dataclass

import cv2
import numpy as np

from eldritch_shield.capture.camera import Camera, CameraConfig
from eldritch_shield.detection.hand_detector import HandDetector, HandDetectorConfig
from eldritch_shield.detection.landmark_worker import LandmarkWorker
from eldritch_shield.overlay.shield import OverlayConfig, ShieldRenderer
from eldritch_shield.recognition.interpreter import InterpreterConfig, LandmarkInterpreter
from eldritch_shield.rig.handoff import init_observation_slot
from eldritch_shield.rig.stabilizer import PoseStabilizer, SmoothingMode, StabilizerConfig
from eldritch_shield.utils.clock import FrameClock
from eldritch_shield.utils.config import load_config
from eldritch_shield.utils.logger import setup_logging

logger = logging.getLogger(__name__)

WINDOW_NAME = "Eldritch Shield"


@dataclass
class AppConfig:
    """Application configuration container."""
    camera: CameraConfig
    detection: HandDetectorConfig
    recognition: InterpreterConfig
    stabilizer: StabilizerConfig
    overlay: OverlayConfig


def _section(config_dict: dict, name: str) -> dict:
    section = config_dict.get(name)
    return section if isinstance(section, dict) else {}


def create_app_config(config_dict: dict) -> AppConfig:
    """Create AppConfig from configuration dictionary. Malformed sections fall back to defaults."""
    return AppConfig(
        camera=CameraConfig.from_dict(_section(config_dict, "camera")),
        detection=HandDetectorConfig.from_dict(_section(config_dict, "detection")),
        recognition=InterpreterConfig.from_dict(_section(config_dict, "recognition")),
        stabilizer=StabilizerConfig.from_dict(_section(config_dict, "stabilizer")),
        overlay=OverlayConfig.from_dict(_section(config_dict, "overlay")),
    )


class ShieldApplication:
    """
    Wires capture, detection, interpretation, rig and overlay together.

    Threads:
    - camera: keeps the newest frame
    - landmarks: detection + interpretation, publishes observations
    - main: render loop, reads the newest observation once per tick
    """

    def __init__(self, config: AppConfig):
        self.config = config

        self.camera = Camera(config.camera)
        self.detector = HandDetector(config.detection)
        self.interpreter = LandmarkInterpreter(config.recognition)
        self.slot = init_observation_slot()
        self.worker = LandmarkWorker(self.camera, self.detector, self.interpreter, self.slot)
        self.rig = PoseStabilizer(config.stabilizer)
        self.renderer = ShieldRenderer(config.overlay)
        self.clock = FrameClock()

        self._running = False
        self._show_status = False

    def start(self) -> bool:
        """Start capture and detection."""
        logger.info("Starting Eldritch Shield...")

        if not self.camera.start():
            logger.error("Failed to start camera")
            return False

        if not self.detector.start():
            logger.error("Failed to start hand detector")
            self.camera.stop()
            return False

        self.worker.start()
        self._running = True
        return True

    def stop(self) -> None:
        """Stop all components."""
        self._running = False
        self.worker.stop()
        self.detector.stop()
        self.camera.stop()
        cv2.destroyAllWindows()
        logger.info("Eldritch Shield stopped")

    def run(self) -> None:
        if not self.start():
            return

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        try:
            self._main_loop()
        finally:
            self.stop()

    def render_tick(self, image: np.ndarray) -> np.ndarray:
        """Advance the rig and draw one display frame from a raw camera image."""
        delta = self.clock.tick()
        display = self.renderer.mirror(image)

        self.rig.update(self.slot.read(), delta, self.renderer.viewport_for(display))
        self.renderer.advance(delta)
        self.renderer.draw(display, self.rig.pose)
        self.renderer.draw_hint(display)
        if self._show_status:
            self.renderer.draw_status(display, self.clock.fps, self.rig.pose)
        return display

    def _main_loop(self) -> None:
        while self._running:
            frame = self.camera.read()
            if frame is None:
                cv2.waitKey(1)
                continue

            cv2.imshow(WINDOW_NAME, self.render_tick(frame.image))

            key = cv2.waitKey(1) & 0xFF
            if key == ord('q') or key == 27:
                self._running = False
            elif key == ord('s'):
                self._show_status = not self._show_status
            elif key == ord('r'):
                self.rig.reset()
                logger.info("Rig reset")

    def _signal_handler(self, signum, frame) -> None:
        logger.info(f"Received signal {signum}, shutting down...")
        self._running = False


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Particle shield overlay driven by hand pose",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Keyboard Controls:
  q/ESC     - Quit
  s         - Toggle FPS / rig status
  r         - Reset the rig to its neutral pose
        """
    )
    parser.add_argument("--config", "-c", default=None, help="Path to configuration file")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")
    parser.add_argument("--smoothing", choices=[m.value for m in SmoothingMode],
                        help="Override stabilizer smoothing mode")
    parser.add_argument("--camera", type=int, help="Override camera device id")
    parser.add_argument("--log-file", help="Also write logs to this file")
    args = parser.parse_args()

    config_dict = load_config(args.config)
    log_config = _section(config_dict, "logging")
    setup_logging(
        level="DEBUG" if args.debug else log_config.get("level", "INFO"),
        log_file=args.log_file or log_config.get("file"),
    )

    app_config = create_app_config(config_dict)
    if args.smoothing:
        app_config.stabilizer.mode = SmoothingMode(args.smoothing)
    if args.camera is not None:
        app_config.camera.device_id = args.camera

    ShieldApplication(app_config).run()


if __name__ == "__main__":
    main()
