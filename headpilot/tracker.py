"""
Face landmark and blendshape tracking using the MediaPipe Face Landmarker.
"""
import logging
import time
from pathlib import Path
from typing import Optional

import cv2
import mediapipe as mp
import numpy as np
from mediapipe.tasks.python import vision
from mediapipe.tasks.python.core.base_options import BaseOptions

from .pose import LEFT_EYE, NOSE_TIP, REQUIRED_LANDMARKS, RIGHT_EYE, FaceFrame, face_frame_from_result

logger = logging.getLogger(__name__)

MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/"
    "face_landmarker/face_landmarker/float16/1/face_landmarker.task"
)


class FaceTracker:
    """Face tracker using the MediaPipe Tasks Face Landmarker in VIDEO mode."""

    def __init__(self, model_path: str, num_faces: int = 1, min_detection_conf: float = 0.5,
                 min_tracking_conf: float = 0.5):
        """
        Initialize the face tracker.

        Args:
            model_path: Path to the face_landmarker.task model bundle
            num_faces: Maximum number of faces to detect
            min_detection_conf: Minimum confidence for face detection
            min_tracking_conf: Minimum confidence for face tracking
        """
        path = Path(model_path).expanduser()
        if not path.exists():
            raise FileNotFoundError(
                f"Face Landmarker model not found: {path}\n"
                f"Download it from {MODEL_URL}"
            )

        options = vision.FaceLandmarkerOptions(
            base_options=BaseOptions(model_asset_path=str(path.resolve())),
            running_mode=vision.RunningMode.VIDEO,
            num_faces=num_faces,
            min_face_detection_confidence=min_detection_conf,
            min_face_presence_confidence=min_detection_conf,
            min_tracking_confidence=min_tracking_conf,
            output_face_blendshapes=True,
            output_facial_transformation_matrixes=False,
        )
        self.landmarker = vision.FaceLandmarker.create_from_options(options)
        self._start = time.monotonic()
        self._last_ts_ms = -1
        logger.info("Face tracker ready (model=%s)", path.name)

    def process(self, frame_bgr: np.ndarray) -> Optional[FaceFrame]:
        """
        Process a frame and return the first face's landmarks and blendshapes.

        Args:
            frame_bgr: Input frame in BGR format

        Returns:
            FaceFrame, or None if no face detected
        """
        # Convert BGR to RGB for MediaPipe
        frame_rgb = cv2.cvtColor(frame_bgr, cv2.COLOR_BGR2RGB)

        # VIDEO mode needs strictly increasing timestamps
        ts_ms = max(int((time.monotonic() - self._start) * 1000), self._last_ts_ms + 1)
        self._last_ts_ms = ts_ms

        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=frame_rgb)
        result = self.landmarker.detect_for_video(image, ts_ms)
        return face_frame_from_result(result)

    def draw_landmarks(self, frame: np.ndarray, face: FaceFrame) -> np.ndarray:
        """
        Draw the landmarks used for pose estimation.

        Args:
            frame: Input frame
            face: Tracked face

        Returns:
            Frame with landmarks drawn
        """
        height, width = frame.shape[:2]
        for index in REQUIRED_LANDMARKS:
            x, y = face.landmarks[index][0], face.landmarks[index][1]
            px, py = int(x * width), int(y * height)
            color = (0, 0, 255) if index == NOSE_TIP else (0, 255, 0)
            cv2.circle(frame, (px, py), 3, color, -1)

        left, right = face.landmarks[LEFT_EYE], face.landmarks[RIGHT_EYE]
        cv2.line(frame, (int(left[0] * width), int(left[1] * height)),
                 (int(right[0] * width), int(right[1] * height)), (255, 255, 0), 1)
        return frame

    def close(self) -> None:
        self.landmarker.close()
