"""
Head pose estimation from face landmarks.
"""
import math
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from .types import ExpressionScores, NeutralBaseline, PoseSample

# Face Landmarker mesh indices
NOSE_TIP = 4
LEFT_EYE = 33
RIGHT_EYE = 263
CHIN = 152
FOREHEAD = 10
LEFT_MOUTH = 61
RIGHT_MOUTH = 291

REQUIRED_LANDMARKS = (NOSE_TIP, LEFT_EYE, RIGHT_EYE, CHIN, FOREHEAD, LEFT_MOUTH, RIGHT_MOUTH)

Point = Sequence[float]


@dataclass
class FaceFrame:
    """Landmarks and expression scores for one detected face."""
    landmarks: Sequence[Point]
    scores: ExpressionScores


def _point(landmarks: Sequence[Point], index: int) -> Optional[Tuple[float, float]]:
    try:
        p = landmarks[index]
        x, y = float(p[0]), float(p[1])
    except (TypeError, IndexError, KeyError, ValueError):
        return None
    if math.isnan(x) or math.isnan(y):
        return None
    return x, y


def raw_angles(landmarks: Optional[Sequence[Point]]) -> Optional[Tuple[float, float, float]]:
    """
    Compute uncalibrated (pitch, yaw, roll) in degrees.

    Args:
        landmarks: Face mesh points as (x, y[, z]) in [0..1] image coordinates

    Returns:
        (pitch, yaw, roll) or None if a required landmark is missing
    """
    if landmarks is None:
        return None

    points = {}
    for index in REQUIRED_LANDMARKS:
        p = _point(landmarks, index)
        if p is None:
            return None
        points[index] = p

    nose = points[NOSE_TIP]
    left_eye, right_eye = points[LEFT_EYE], points[RIGHT_EYE]
    chin, forehead = points[CHIN], points[FOREHEAD]
    left_mouth, right_mouth = points[LEFT_MOUTH], points[RIGHT_MOUTH]

    # Roll from the line between the eye corners
    roll = math.degrees(math.atan2(right_eye[1] - left_eye[1], right_eye[0] - left_eye[0]))

    # Pitch from nose drop below the eyes, scaled by face height so it is
    # stable across distance from the camera
    eye_center_y = (left_eye[1] + right_eye[1]) / 2
    vertical_distance = chin[1] - forehead[1]
    if vertical_distance == 0:
        return None
    pitch = math.degrees(math.atan2(nose[1] - eye_center_y, vertical_distance)) * 2

    # Yaw from nose offset against the mouth centre, normalized by mouth width
    mouth_center_x = (left_mouth[0] + right_mouth[0]) / 2
    mouth_width = abs(right_mouth[0] - left_mouth[0])
    if mouth_width == 0:
        return None
    yaw = ((nose[0] - mouth_center_x) / mouth_width) * 90

    return pitch, yaw, roll


def eye_center(landmarks: Sequence[Point]) -> Tuple[float, float]:
    """Midpoint of the two eye corners."""
    left_eye = _point(landmarks, LEFT_EYE)
    right_eye = _point(landmarks, RIGHT_EYE)
    if left_eye is None or right_eye is None:
        return 0.5, 0.5
    return (left_eye[0] + right_eye[0]) / 2, (left_eye[1] + right_eye[1]) / 2


def normalize(landmarks: Optional[Sequence[Point]], baseline: NeutralBaseline,
              timestamp: float) -> Optional[PoseSample]:
    """
    Convert landmarks into a calibrated pose sample.

    Args:
        landmarks: Face mesh points
        baseline: Neutral pose to subtract
        timestamp: Monotonic frame time in seconds

    Returns:
        PoseSample, or None when the frame must be skipped
    """
    angles = raw_angles(landmarks)
    if angles is None:
        return None
    pitch, yaw, roll = angles
    return PoseSample(
        pitch=pitch - baseline.pitch,
        yaw=yaw - baseline.yaw,
        roll=roll - baseline.roll,
        timestamp=timestamp,
        eye_center=eye_center(landmarks),
    )


def gaze_point(pose: PoseSample, yaw_gain: float, pitch_gain: float,
               speed: float = 1.0) -> Tuple[float, float]:
    """
    Map a pose to a normalized cursor position.

    Returns:
        (x, y) clamped to [0..1]
    """
    cx, cy = pose.eye_center
    x = cx + (pose.yaw / 90) * yaw_gain * speed
    y = cy + (pose.pitch / 90) * pitch_gain * speed
    return max(0.0, min(1.0, x)), max(0.0, min(1.0, y))


def face_frame_from_result(result: Any) -> Optional[FaceFrame]:
    """
    Convert a Face Landmarker result into a FaceFrame.

    Args:
        result: Object exposing ``face_landmarks`` (lists of points with
            x/y/z attributes) and ``face_blendshapes`` (lists of categories
            with category_name/score attributes)

    Returns:
        FaceFrame for the first face, or None if no face was detected
    """
    faces = getattr(result, "face_landmarks", None)
    if not faces:
        return None

    landmarks = [(lm.x, lm.y, lm.z) for lm in faces[0]]

    scores = {}
    blendshapes = getattr(result, "face_blendshapes", None)
    if blendshapes:
        for category in blendshapes[0]:
            scores[category.category_name] = category.score

    return FaceFrame(landmarks=landmarks, scores=ExpressionScores(scores))
