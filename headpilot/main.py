"""
Main application for hands-free head-pose browser control.
"""
import asyncio
import logging
import os
import sys
import time

import cv2
from dotenv import load_dotenv

from .config import Cfg, load_config
from .controller_browser import BrowserController
from .controller_mock import MockController
from .dispatch import dispatch
from .engine import GestureEngine
from .storage import JsonStateStore
from .tracker import FaceTracker
from .types import EnableTextFieldMode, Mode

logger = logging.getLogger(__name__)

MODE_COLORS = {
    Mode.NEUTRAL: (200, 200, 200),
    Mode.GESTURE_ACTIVE: (0, 255, 0),
    Mode.TEXT_FIELD: (0, 165, 255),
}


class HeadPilotApp:
    """Main application class: camera -> face tracker -> engine -> controller."""

    def __init__(self, config: Cfg, use_browser: bool = False, cdp_url: str = None):
        """Initialize the application with configuration."""
        self.config = config
        self.tracker = FaceTracker(
            model_path=config.mediapipe.model_path,
            num_faces=config.mediapipe.num_faces,
            min_detection_conf=config.mediapipe.min_detection_confidence,
            min_tracking_conf=config.mediapipe.min_tracking_confidence
        )
        self.store = JsonStateStore(config.storage.directory, config.storage.stale_after_days)
        self.engine = GestureEngine(config, self.store)

        # Choose controller type
        if use_browser:
            self.controller = BrowserController(cdp_url=cdp_url)
            print("🌐 Using browser controller")
        else:
            self.controller = MockController()

        # Initialize camera
        self.cap = cv2.VideoCapture(config.camera.index)
        self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, config.camera.width)
        self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, config.camera.height)
        self.cap.set(cv2.CAP_PROP_FPS, config.camera.fps)

        if not self.cap.isOpened():
            raise RuntimeError(f"Failed to open camera {config.camera.index}")

    async def _execute(self, actions) -> None:
        for action in actions:
            result = await dispatch(self.controller, action)
            if isinstance(action, EnableTextFieldMode) and result is not None:
                self.engine.set_text_field_count(result)

    async def run(self):
        """Run the main application loop."""
        print(f"Starting {self.config.display.window_name}")
        print("🎯 Head gestures:")
        print("  - Look straight ahead for 3s to calibrate")
        print("  - Double blink = gesture mode, eyebrow raise = text-field mode")
        print("  - Open then close mouth = click, snap head = back/forward")
        print("  - Tilt = switch tab, smile = new tab, wink = refresh/close tab")
        print("Press 'q' to quit, 'c' to toggle control, 'r' to recalibrate")

        if isinstance(self.controller, BrowserController):
            await self.controller.start()

        try:
            while True:
                ret, frame = self.cap.read()
                if not ret:
                    logger.error("Failed to read frame from camera")
                    break

                face = self.tracker.process(frame)
                t_now = time.monotonic()

                actions = self.engine.process_frame(
                    landmarks=face.landmarks if face else None,
                    scores=face.scores if face else None,
                    t_now=t_now
                )
                await self._execute(actions)

                if face and self.config.display.show_landmarks:
                    frame = self.tracker.draw_landmarks(frame, face)
                self._draw_status(frame, face is not None)

                cv2.imshow(self.config.display.window_name, frame)

                key = cv2.waitKey(1) & 0xFF
                if key == ord('q'):
                    break
                if key == ord('c'):
                    if self.engine.enabled:
                        await self._execute(self.engine.disable(time.monotonic()))
                    else:
                        self.engine.enable()
                if key == ord('r'):
                    self.engine.recalibrate(time.monotonic())
        finally:
            await self.close()

    def _draw_status(self, frame, face_found: bool) -> None:
        engine = self.engine
        white = (255, 255, 255)

        if not face_found:
            status = "No face detected"
        elif engine.calibration.pending:
            status = f"Calibrating... {engine.calibration.progress * 100:.0f}%"
        elif not engine.enabled:
            status = "Control paused"
        else:
            status = f"Mode: {engine.mode.value} | Zone: {engine.zone.value}"
        color = MODE_COLORS.get(engine.mode, white)
        cv2.putText(frame, status, (10, 30), cv2.FONT_HERSHEY_SIMPLEX, 0.7, color, 2)

        pose = engine.last_pose
        if pose is not None:
            pose_info = f"Pitch={pose.pitch:.1f} Yaw={pose.yaw:.1f} Roll={pose.roll:.1f}"
            cv2.putText(frame, pose_info, (10, 60), cv2.FONT_HERSHEY_SIMPLEX, 0.5, white, 1)
        cv2.putText(frame, f"Fatigue: {engine.fatigue.value}", (10, 85),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, white, 1)

        # Progress bars for hold gestures in flight
        y = 110
        for name, value in engine.progress.items():
            if name == "calibration" or value <= 0:
                continue
            cv2.putText(frame, name, (10, y), cv2.FONT_HERSHEY_SIMPLEX, 0.45, white, 1)
            cv2.rectangle(frame, (110, y - 10), (110 + int(150 * value), y), (0, 255, 255), -1)
            cv2.rectangle(frame, (110, y - 10), (260, y), white, 1)
            y += 20

        cv2.putText(frame, "q: quit  c: toggle  r: recalibrate", (10, frame.shape[0] - 20),
                    cv2.FONT_HERSHEY_SIMPLEX, 0.5, white, 1)

    async def close(self) -> None:
        """Cleanup resources."""
        self.cap.release()
        cv2.destroyAllWindows()
        self.tracker.close()
        self.store.close()
        if isinstance(self.controller, BrowserController):
            await self.controller.close()


async def main():
    """Entry point for the application."""
    load_dotenv()
    config = load_config(os.getenv("HEADPILOT_CONFIG"))
    logging.basicConfig(level=getattr(logging, config.logging.level.upper(), logging.INFO))

    # Check for --browser flag
    use_browser = "--browser" in sys.argv
    cdp_url = os.getenv("HEADPILOT_CDP_URL")

    app = HeadPilotApp(config, use_browser=use_browser, cdp_url=cdp_url)
    try:
        await app.run()
    except KeyboardInterrupt:
        print("\nApplication interrupted by user")


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
