"""
Test cases for neutral-pose calibration.
"""
import tempfile
import unittest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from headpilot.calibration import CalibrationManager
from headpilot.config import CalibrationConfig, load_config
from headpilot.storage import JsonStateStore
from headpilot.types import NeutralBaseline, PoseSample


def feed(manager, samples, start=0.0, step=0.05):
    """Feed (pitch, yaw, roll) samples at a fixed frame interval."""
    completed = False
    for i, (pitch, yaw, roll) in enumerate(samples):
        completed = manager.observe(PoseSample(pitch, yaw, roll, timestamp=start + i * step)) or completed
    return completed


class TestCalibrationManager(unittest.TestCase):
    """Test baseline averaging and persistence."""

    def setUp(self):
        """Set up test configuration."""
        self.cfg = load_config().calibration
        self.tmp = tempfile.TemporaryDirectory()
        self.store = JsonStateStore(self.tmp.name, background=False)

    def tearDown(self):
        self.store.close()
        self.tmp.cleanup()

    def test_baseline_is_mean(self):
        manager = CalibrationManager(CalibrationConfig(duration_ms=1000, min_samples=10), self.store)
        samples = [(10 + (i % 3), -4.0, 2 - (i % 2)) for i in range(14)]
        self.assertTrue(feed(manager, samples, step=0.125))

        # Completes on the 10th sample (t=1.125s); later samples are ignored
        n = 10
        samples = samples[:n]
        self.assertFalse(manager.pending)
        self.assertAlmostEqual(manager.baseline.pitch, sum(s[0] for s in samples) / n)
        self.assertAlmostEqual(manager.baseline.yaw, -4.0)
        self.assertAlmostEqual(manager.baseline.roll, sum(s[2] for s in samples) / n)

    def test_waits_for_duration(self):
        manager = CalibrationManager(self.cfg, self.store)
        # 100 samples but only ~1 second of them
        self.assertFalse(feed(manager, [(1.0, 1.0, 1.0)] * 100, step=0.01))
        self.assertTrue(manager.pending)
        self.assertGreater(manager.progress, 0.0)
        self.assertLess(manager.progress, 1.0)

    def test_waits_for_min_samples(self):
        """A long but sparse stream never completes."""
        manager = CalibrationManager(self.cfg, self.store)
        self.assertFalse(feed(manager, [(0.0, 0.0, 0.0)] * 10, step=1.0))
        self.assertTrue(manager.pending)

    def test_persisted_and_reloaded(self):
        manager = CalibrationManager(self.cfg, self.store)
        feed(manager, [(3.0, -2.0, 1.0)] * 70)

        reloaded = CalibrationManager(self.cfg, self.store)
        self.assertFalse(reloaded.pending)
        self.assertEqual(reloaded.baseline, NeutralBaseline(3.0, -2.0, 1.0))
        self.assertEqual(reloaded.progress, 1.0)

    def test_reset_clears_stored_baseline(self):
        manager = CalibrationManager(self.cfg, self.store)
        feed(manager, [(3.0, -2.0, 1.0)] * 70)
        manager.reset()

        self.assertTrue(manager.pending)
        self.assertEqual(manager.baseline, NeutralBaseline())
        self.assertIsNone(self.store.load_baseline())
        self.assertTrue(CalibrationManager(self.cfg, self.store).pending)

    def test_skip(self):
        manager = CalibrationManager(self.cfg)
        manager.skip()
        self.assertFalse(manager.pending)
        self.assertEqual(manager.baseline, NeutralBaseline())
        self.assertFalse(manager.observe(PoseSample(5.0, 5.0, 5.0, timestamp=0.0)))


if __name__ == "__main__":
    unittest.main()
