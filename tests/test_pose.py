"""
Test cases for head pose estimation from synthetic landmarks.
"""
import unittest
import sys
from pathlib import Path
from types import SimpleNamespace

# Add project root and tests dir to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))
sys.path.insert(0, str(Path(__file__).parent))

from headpilot.pose import raw_angles, normalize, gaze_point, face_frame_from_result, NOSE_TIP
from headpilot.types import Expression, NeutralBaseline, PoseSample
from face_fixtures import make_landmarks


class TestRawAngles(unittest.TestCase):
    """Test uncalibrated angle computation."""

    def test_neutral_face(self):
        pitch, yaw, roll = raw_angles(make_landmarks())
        self.assertAlmostEqual(pitch, 0.0, places=6)
        self.assertAlmostEqual(yaw, 0.0, places=6)
        self.assertAlmostEqual(roll, 0.0, places=6)

    def test_known_pose(self):
        pitch, yaw, roll = raw_angles(make_landmarks(pitch=20, yaw=-35, roll=12))
        self.assertAlmostEqual(pitch, 20.0, places=6)
        self.assertAlmostEqual(yaw, -35.0, places=6)
        self.assertAlmostEqual(roll, 12.0, places=6)

    def test_missing_landmarks(self):
        """Absent landmarks skip the frame instead of raising."""
        self.assertIsNone(raw_angles(None))
        self.assertIsNone(raw_angles([]))
        self.assertIsNone(raw_angles([(0.5, 0.5)] * 100))  # too short for the mouth corners

        landmarks = make_landmarks()
        landmarks[NOSE_TIP] = None
        self.assertIsNone(raw_angles(landmarks))

    def test_degenerate_geometry(self):
        """Zero face height or mouth width cannot be normalized."""
        self.assertIsNone(raw_angles([(0.5, 0.5, 0.0)] * 478))

    def test_garbage_points(self):
        landmarks = make_landmarks()
        landmarks[NOSE_TIP] = ("a", "b")
        self.assertIsNone(raw_angles(landmarks))


class TestNormalize(unittest.TestCase):
    """Test baseline subtraction."""

    def test_subtracts_baseline(self):
        baseline = NeutralBaseline(pitch=5.0, yaw=-3.0, roll=1.0)
        pose = normalize(make_landmarks(pitch=15, yaw=7, roll=4), baseline, timestamp=2.5)
        self.assertAlmostEqual(pose.pitch, 10.0, places=6)
        self.assertAlmostEqual(pose.yaw, 10.0, places=6)
        self.assertAlmostEqual(pose.roll, 3.0, places=6)
        self.assertEqual(pose.timestamp, 2.5)

    def test_eye_center(self):
        pose = normalize(make_landmarks(), NeutralBaseline(), timestamp=0.0)
        self.assertAlmostEqual(pose.eye_center[0], 0.5)
        self.assertAlmostEqual(pose.eye_center[1], 0.4)

    def test_missing_returns_none(self):
        self.assertIsNone(normalize(None, NeutralBaseline(), timestamp=0.0))


class TestGazePoint(unittest.TestCase):
    """Test cursor mapping."""

    def test_centered(self):
        pose = PoseSample(pitch=0.0, yaw=0.0, roll=0.0, timestamp=0.0, eye_center=(0.5, 0.4))
        self.assertEqual(gaze_point(pose, 0.15, 0.1), (0.5, 0.4))

    def test_offset_and_speed(self):
        pose = PoseSample(pitch=9.0, yaw=18.0, roll=0.0, timestamp=0.0, eye_center=(0.5, 0.5))
        x, y = gaze_point(pose, 0.15, 0.1, speed=2.0)
        self.assertAlmostEqual(x, 0.5 + 0.2 * 0.15 * 2)
        self.assertAlmostEqual(y, 0.5 + 0.1 * 0.1 * 2)

    def test_clamped(self):
        pose = PoseSample(pitch=-900.0, yaw=900.0, roll=0.0, timestamp=0.0)
        self.assertEqual(gaze_point(pose, 0.15, 0.1), (1.0, 0.0))


class TestFaceFrameFromResult(unittest.TestCase):
    """Test conversion of Face Landmarker results."""

    def test_first_face_converted(self):
        landmarks = [SimpleNamespace(x=0.1 * i, y=0.2, z=0.0) for i in range(3)]
        blendshapes = [
            SimpleNamespace(category_name="jawOpen", score=0.7),
            SimpleNamespace(category_name="cheekPuff", score=0.9),
        ]
        result = SimpleNamespace(face_landmarks=[landmarks], face_blendshapes=[blendshapes])

        frame = face_frame_from_result(result)
        self.assertEqual(len(frame.landmarks), 3)
        self.assertAlmostEqual(frame.landmarks[2][0], 0.2)
        self.assertAlmostEqual(frame.scores[Expression.JAW_OPEN], 0.7)
        self.assertEqual(frame.scores[Expression.SMILE_LEFT], 0.0)

    def test_no_face(self):
        self.assertIsNone(face_frame_from_result(SimpleNamespace(face_landmarks=[], face_blendshapes=[])))

    def test_missing_blendshapes(self):
        result = SimpleNamespace(face_landmarks=[[SimpleNamespace(x=0.5, y=0.5, z=0.0)]])
        frame = face_frame_from_result(result)
        self.assertEqual(frame.scores[Expression.BLINK_LEFT], 0.0)


if __name__ == "__main__":
    unittest.main()
