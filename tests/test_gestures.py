"""
Test cases for gesture detectors with synthetic score and pose traces.
"""
import unittest
import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from headpilot.config import load_config
from headpilot.cooldowns import Cooldowns
from headpilot.dwell import AdaptiveDwellManager
from headpilot.gestures import AttemptTracker, HoldGesture, ClickGesture, SnapTurnGesture, TiltSwitchGesture
from headpilot.types import Click, CloseTab, GestureType, GoBack, GoForward


def frames(start_ms: int, end_ms: int, step_ms: int = 100):
    """Timestamps in seconds from start to end (inclusive) without float drift."""
    return [ms / 1000.0 for ms in range(start_ms, end_ms + 1, step_ms)]


class TestAttemptTracker(unittest.TestCase):
    """Test the shared attempt slot."""

    def setUp(self):
        """Set up test configuration."""
        self.cfg = load_config()
        self.dwell = AdaptiveDwellManager(self.cfg.dwell)
        self.tracker = AttemptTracker(self.dwell)

    def test_single_slot(self):
        self.assertTrue(self.tracker.open("smile", GestureType.SMILE, 0.0))
        self.assertFalse(self.tracker.open("wink_left", GestureType.WINK, 0.1))
        self.assertTrue(self.tracker.open("smile", GestureType.SMILE, 0.2))
        self.assertEqual(self.tracker.attempt.start_time, 0.0)

    def test_resolve_records_outcome(self):
        self.tracker.open("smile", GestureType.SMILE, 1.0)
        self.tracker.resolve("smile", True, 2.5)
        history = self.dwell.history[GestureType.SMILE]
        self.assertEqual(len(history.successes), 1)
        self.assertAlmostEqual(history.successes[0].duration, 1500.0)
        self.assertIsNone(self.tracker.attempt)

    def test_zero_length_failure_ignored(self):
        self.tracker.open("smile", GestureType.SMILE, 1.0)
        self.tracker.resolve("smile", False, 1.0)
        self.assertEqual(self.dwell.history[GestureType.SMILE].attempts, 0)

    def test_only_owner_resolves(self):
        self.tracker.open("smile", GestureType.SMILE, 1.0)
        self.tracker.resolve("wink_left", True, 2.0)
        self.assertTrue(self.tracker.owns("smile"))

    def test_cancel_is_failure(self):
        self.tracker.open("wink_right", GestureType.WINK, 1.0)
        self.tracker.cancel(1.4)
        self.assertEqual(len(self.dwell.history[GestureType.WINK].failures), 1)

    def test_unrecorded_attempt(self):
        self.tracker.open("confirm_edit", GestureType.SMILE, 0.0, record=False)
        self.tracker.resolve("confirm_edit", True, 1.0)
        self.assertEqual(self.dwell.history[GestureType.SMILE].attempts, 0)


class TestHoldGesture(unittest.TestCase):
    """Test threshold-crossing with sustained hold and cooldown."""

    def setUp(self):
        self.cfg = load_config()
        self.dwell = AdaptiveDwellManager(self.cfg.dwell)
        self.tracker = AttemptTracker(self.dwell)
        self.cooldowns = Cooldowns(self.cfg.cooldowns)
        self.gesture = HoldGesture(
            name="wink_right",
            gesture_type=GestureType.WINK,
            action=CloseTab,
            cooldown="close_tab",
            tracker=self.tracker,
            cooldowns=self.cooldowns,
            dwell_ms=lambda t_now: 1000.0,
        )

    def run_hold(self, times, active=True):
        return [a for a in (self.gesture.update(active, t) for t in times) if a is not None]

    def test_fires_after_dwell(self):
        self.assertEqual(self.run_hold(frames(0, 900)), [])
        self.assertAlmostEqual(self.gesture.progress, 0.9)
        self.assertEqual(self.gesture.update(True, 1.0), CloseTab())
        self.assertEqual(self.gesture.progress, 0.0)
        self.assertEqual(len(self.dwell.history[GestureType.WINK].successes), 1)

    def test_early_release_is_failure(self):
        self.run_hold(frames(0, 500))
        self.assertIsNone(self.gesture.update(False, 0.6))
        history = self.dwell.history[GestureType.WINK]
        self.assertEqual(len(history.failures), 1)
        self.assertAlmostEqual(history.failures[0].duration, 600.0)

    def test_cooldown_suppresses_but_counts(self):
        """Twice within the cooldown emits once; after the cooldown emits again."""
        self.assertEqual(len(self.run_hold(frames(0, 1000))), 1)
        self.gesture.update(False, 1.1)
        self.assertEqual(len(self.run_hold(frames(1200, 2300))), 0)  # cooldown until 3.0
        self.assertEqual(len(self.dwell.history[GestureType.WINK].successes), 2)

        self.gesture.update(False, 2.4)
        self.assertEqual(len(self.run_hold(frames(2500, 3600))), 1)

    def test_blocked_by_other_attempt(self):
        self.tracker.open("smile", GestureType.SMILE, 0.0)
        self.assertEqual(self.run_hold(frames(0, 2000)), [])
        self.assertTrue(self.tracker.owns("smile"))


class TestClickGesture(unittest.TestCase):
    """Test the two-stage open-then-close click."""

    def setUp(self):
        self.cfg = load_config()
        self.dwell = AdaptiveDwellManager(self.cfg.dwell)
        self.tracker = AttemptTracker(self.dwell)
        self.click = ClickGesture(self.cfg, self.tracker, Cooldowns(self.cfg.cooldowns))

    def trace(self, open_until_ms: int, end_ms: int = 3000):
        actions = []
        for t in frames(0, end_ms):
            jaw = 0.8 if t * 1000 < open_until_ms else 0.0
            action = self.click.update(jaw, True, t)
            if action is not None:
                actions.append(action)
        return actions

    def test_close_within_window_clicks(self):
        self.assertEqual(self.trace(open_until_ms=1000), [Click()])
        self.assertEqual(len(self.dwell.history[GestureType.CLICK].successes), 1)

    def test_window_starts_at_stage_two(self):
        """Closing 1.2s after arming (2.0s after opening) still clicks."""
        self.assertEqual(self.trace(open_until_ms=2000), [Click()])
        self.assertEqual(self.click.stage, 0)

    def test_close_before_stage_two(self):
        self.assertEqual(self.trace(open_until_ms=500), [])
        self.assertEqual(len(self.dwell.history[GestureType.CLICK].failures), 1)

    def test_close_after_window(self):
        """Closing 2.0s after arming is outside the 1.5s window."""
        self.assertEqual(self.trace(open_until_ms=2800), [])
        self.assertEqual(len(self.dwell.history[GestureType.CLICK].failures), 1)

    def test_must_close_before_rearming(self):
        """Holding the mouth open past the window never starts a new attempt."""
        self.trace(open_until_ms=5000, end_ms=4000)
        self.assertIsNone(self.tracker.attempt)
        self.assertEqual(self.click.stage, 0)

    def test_stage_progression(self):
        self.click.update(0.8, True, 0.0)
        self.assertEqual(self.click.stage, 1)
        self.click.update(0.8, True, 0.4)
        self.assertAlmostEqual(self.click.progress, 0.5)
        self.click.update(0.8, True, 0.8)
        self.assertEqual(self.click.stage, 2)

    def test_ineligible_cancels(self):
        self.click.update(0.8, True, 0.0)
        self.click.update(0.8, False, 0.5)
        self.assertIsNone(self.tracker.attempt)
        self.assertEqual(len(self.dwell.history[GestureType.CLICK].failures), 1)

    def test_sensitivity_scales_threshold(self):
        self.cfg.sensitivity.click = 2.0  # threshold 0.2
        self.click.update(0.3, True, 0.0)
        self.assertEqual(self.click.stage, 1)


class TestSnapTurnGesture(unittest.TestCase):
    """Test velocity-gated back/forward snaps."""

    def setUp(self):
        self.cfg = load_config()
        self.dwell = AdaptiveDwellManager(self.cfg.dwell)
        self.snap = SnapTurnGesture(self.cfg, self.dwell, Cooldowns(self.cfg.cooldowns))

    def run_yaws(self, yaws, start=0.0):
        actions, prev = [], None
        for i, yaw in enumerate(yaws):
            action = self.snap.update(yaw, prev, start + i * 0.016)
            if action is not None:
                actions.append(action)
            prev = yaw
        return actions

    def test_slow_turn_does_not_navigate(self):
        self.assertEqual(self.run_yaws([0, 0, 5, 48, 49, 51]), [])

    def test_fast_snap_forward(self):
        self.assertEqual(self.run_yaws([0, 0, 5, 55]), [GoForward()])
        self.assertEqual(len(self.dwell.history[GestureType.NAVIGATION].successes), 1)

    def test_fast_snap_back(self):
        self.assertEqual(self.run_yaws([0, -10, -60]), [GoBack()])

    def test_first_frame_has_no_velocity(self):
        self.assertIsNone(self.snap.update(70, None, 0.0))

    def test_per_direction_cooldown(self):
        self.assertEqual(self.run_yaws([0, 60, 0, 60]), [GoForward()])
        self.assertEqual(self.run_yaws([0, -60], start=0.5), [GoBack()])
        self.assertEqual(self.run_yaws([0, 60], start=2.1), [GoForward()])


class TestTiltSwitchGesture(unittest.TestCase):
    """Test roll-driven tab switching."""

    def setUp(self):
        self.cfg = load_config()
        self.dwell = AdaptiveDwellManager(self.cfg.dwell)
        self.tilt = TiltSwitchGesture(self.cfg, Cooldowns(self.cfg.cooldowns), "tab_switch", dwell=self.dwell)

    def test_directions(self):
        self.assertEqual(self.tilt.update(-30, 0, 0.0), "left")
        self.assertEqual(self.tilt.update(30, 0, 1.0), "right")

    def test_repeats_while_held_after_cooldown(self):
        fired = [self.tilt.update(-30, 0, t) for t in frames(0, 2500)]
        self.assertEqual(fired.count("left"), 3)  # 0.0, 1.0, 2.0

    def test_suppressed_during_snap(self):
        self.assertIsNone(self.tilt.update(-30, 45, 0.0))

    def test_below_threshold(self):
        self.assertIsNone(self.tilt.update(-20, 0, 0.0))

    def test_sensitivity(self):
        self.cfg.sensitivity.gesture = 2.0  # threshold 12.5
        self.assertEqual(self.tilt.update(-15, 0, 0.0), "left")

    def test_records_once_per_crossing(self):
        for t in frames(0, 900):
            self.tilt.update(-30, 0, t)
        self.assertEqual(len(self.dwell.history[GestureType.TAB_SWITCH].successes), 1)


if __name__ == "__main__":
    unittest.main()
