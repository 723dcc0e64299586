"""
Synthetic face landmarks and expression scores for tests.
"""
import math
from typing import Dict, List, Tuple

from headpilot.pose import CHIN, FOREHEAD, LEFT_EYE, LEFT_MOUTH, NOSE_TIP, RIGHT_EYE, RIGHT_MOUTH

NUM_LANDMARKS = 478


def make_landmarks(pitch: float = 0.0, yaw: float = 0.0, roll: float = 0.0) -> List[Tuple[float, float, float]]:
    """Build a face mesh whose raw pose is exactly (pitch, yaw, roll)."""
    points = [(0.5, 0.5, 0.0)] * NUM_LANDMARKS

    left_eye = (0.4, 0.4)
    r = math.radians(roll)
    right_eye = (left_eye[0] + 0.2 * math.cos(r), left_eye[1] + 0.2 * math.sin(r))
    eye_center_y = (left_eye[1] + right_eye[1]) / 2

    forehead, chin = (0.5, 0.2), (0.5, 0.8)
    nose_y = eye_center_y + (chin[1] - forehead[1]) * math.tan(math.radians(pitch / 2))

    left_mouth, right_mouth = (0.45, 0.7), (0.55, 0.7)
    nose_x = 0.5 + (yaw / 90) * 0.1

    for index, (x, y) in (
        (LEFT_EYE, left_eye), (RIGHT_EYE, right_eye), (FOREHEAD, forehead), (CHIN, chin),
        (LEFT_MOUTH, left_mouth), (RIGHT_MOUTH, right_mouth), (NOSE_TIP, (nose_x, nose_y)),
    ):
        points[index] = (x, y, 0.0)
    return points


def blink() -> Dict[str, float]:
    return {"eyeBlinkLeft": 0.9, "eyeBlinkRight": 0.9}


def wink_left() -> Dict[str, float]:
    return {"eyeBlinkLeft": 0.9, "eyeBlinkRight": 0.0}


def wink_right() -> Dict[str, float]:
    return {"eyeBlinkLeft": 0.0, "eyeBlinkRight": 0.9}


def smile(score: float = 0.8) -> Dict[str, float]:
    return {"mouthSmileLeft": score, "mouthSmileRight": score}


def eyebrows_up() -> Dict[str, float]:
    return {"browInnerUp": 0.6, "browOuterUpLeft": 0.6, "browOuterUpRight": 0.6}


def mouth_open() -> Dict[str, float]:
    return {"jawOpen": 0.8}
