"""
Gesture recognition classes that convert head pose and expression scores
into action intents.
"""
import logging
from typing import Callable, Optional

from .config import Cfg
from .cooldowns import Cooldowns
from .dwell import AdaptiveDwellManager
from .types import Action, Click, GestureAttempt, GestureType, GoBack, GoForward

logger = logging.getLogger(__name__)


class AttemptTracker:
    """
    Holds the single outstanding gesture attempt.

    Gesture families that can be active in the same zone are mutually
    exclusive, so one slot is shared by all detectors. Whoever opens it
    first owns it until it resolves.
    """

    def __init__(self, dwell: AdaptiveDwellManager):
        self.dwell = dwell
        self.attempt: Optional[GestureAttempt] = None
        self._record = True

    def owns(self, owner: str) -> bool:
        return self.attempt is not None and self.attempt.owner == owner

    def open(self, owner: str, gesture_type: GestureType, t_now: float, record: bool = True) -> bool:
        """
        Open an attempt for owner unless another detector holds the slot.

        Returns:
            True if owner holds the slot after the call
        """
        if self.attempt is not None:
            return self.attempt.owner == owner
        self.attempt = GestureAttempt(gesture_type=gesture_type, start_time=t_now, owner=owner)
        self._record = record
        logger.debug("Attempt opened: %s (%s)", owner, gesture_type.value)
        return True

    def elapsed_ms(self, t_now: float) -> float:
        if self.attempt is None:
            return 0.0
        return (t_now - self.attempt.start_time) * 1000.0

    def resolve(self, owner: str, success: bool, t_now: float) -> None:
        """Close owner's attempt and report the outcome to the dwell manager."""
        if not self.owns(owner):
            return
        attempt = self.attempt
        duration_ms = self.elapsed_ms(t_now)
        self.attempt = None
        logger.debug("Attempt %s: %s after %.0fms", "succeeded" if success else "failed",
                     owner, duration_ms)

        # A zero-length failure is noise, not a real attempt
        if not self._record or (not success and duration_ms <= 0):
            return
        self.dwell.record_outcome(attempt.gesture_type, success, duration_ms, t_now)

    def cancel(self, t_now: float) -> None:
        """Resolve whatever is outstanding as a failure."""
        if self.attempt is not None:
            self.resolve(self.attempt.owner, False, t_now)


class HoldGesture:
    """
    Threshold crossing confirmed by a sustained hold.

    Features:
    - Attempt opened on the first frame the condition holds
    - Observable progress (elapsed / dwell)
    - Fires when the dwell time is reached, subject to the action cooldown
    - A cooldown-suppressed fire still resolves the attempt as a success
    - Releasing early resolves the attempt as a failure
    """

    def __init__(self, name: str, gesture_type: GestureType, action: Callable[[], Action],
                 cooldown: str, tracker: AttemptTracker, cooldowns: Cooldowns,
                 dwell_ms: Callable[[float], float], record: bool = True):
        self.name = name
        self.gesture_type = gesture_type
        self.action = action
        self.cooldown = cooldown
        self.tracker = tracker
        self.cooldowns = cooldowns
        self.dwell_ms = dwell_ms
        self.record = record
        self.progress = 0.0

    def update(self, active: bool, t_now: float) -> Optional[Action]:
        """
        Advance the hold by one frame.

        Args:
            active: Whether the gesture condition holds this frame
            t_now: Current timestamp in seconds

        Returns:
            The action on the frame the hold completes, None otherwise
        """
        if not active:
            self.cancel(t_now)
            return None

        if not self.tracker.open(self.name, self.gesture_type, t_now, record=self.record):
            return None

        elapsed_ms = self.tracker.elapsed_ms(t_now)
        dwell_ms = self.dwell_ms(t_now)
        self.progress = min(1.0, elapsed_ms / dwell_ms) if dwell_ms > 0 else 1.0
        if elapsed_ms < dwell_ms:
            return None

        fired = self.cooldowns.try_fire(self.cooldown, t_now)
        self.tracker.resolve(self.name, True, t_now)
        self.progress = 0.0
        if not fired:
            logger.debug("%s suppressed by cooldown", self.name)
            return None
        return self.action()

    def cancel(self, t_now: float) -> None:
        if self.tracker.owns(self.name):
            self.tracker.resolve(self.name, False, t_now)
        self.progress = 0.0


class ClickGesture:
    """
    Two-stage mouth-open click.

    Stage 1 is a fixed hold of an open mouth; stage 2 waits for the mouth
    to close. The click fires on close only if it happens within the close
    window measured from the moment stage 2 was reached. Talking rarely holds
    the mouth open long enough to reach stage 2.
    """

    name = "click"

    def __init__(self, cfg: Cfg, tracker: AttemptTracker, cooldowns: Cooldowns):
        self.cfg = cfg
        self.tracker = tracker
        self.cooldowns = cooldowns
        self.progress = 0.0
        self._await_close = False  # must see a closed mouth before re-arming

    @property
    def stage(self) -> int:
        return self.tracker.attempt.stage if self.tracker.owns(self.name) else 0

    def update(self, jaw_open: float, eligible: bool, t_now: float) -> Optional[Action]:
        """
        Process one frame of mouth-open score.

        Args:
            jaw_open: jawOpen expression score
            eligible: Whether the mode/zone allows clicking this frame
            t_now: Current timestamp in seconds

        Returns:
            Click when the open-then-close pattern completes, None otherwise
        """
        threshold = self.cfg.thresholds.jaw_open / self.cfg.sensitivity.click
        is_open = jaw_open > threshold
        if not is_open:
            self._await_close = False

        if not eligible:
            self.cancel(t_now)
            return None

        if self._await_close:
            return None

        hold_ms = self.cfg.click.hold_ms
        window_ms = self.cfg.click.close_window_ms

        if is_open:
            if not self.tracker.open(self.name, GestureType.CLICK, t_now):
                return None
            elapsed_ms = self.tracker.elapsed_ms(t_now)
            attempt = self.tracker.attempt

            if attempt.stage == 1:
                self.progress = min(1.0, elapsed_ms / hold_ms) if hold_ms > 0 else 1.0
                if elapsed_ms >= hold_ms:
                    attempt.stage = 2
                    attempt.armed_at = t_now
                    logger.debug("Click armed, close mouth to click")
                return None

            if (t_now - attempt.armed_at) * 1000.0 > window_ms:
                logger.debug("Click window expired")
                self.tracker.resolve(self.name, False, t_now)
                self.progress = 0.0
                self._await_close = True
            return None

        # Mouth closed
        if not self.tracker.owns(self.name):
            return None
        attempt = self.tracker.attempt
        self.progress = 0.0

        if attempt.stage == 2 and (t_now - attempt.armed_at) * 1000.0 <= window_ms:
            fired = self.cooldowns.try_fire("click", t_now)
            self.tracker.resolve(self.name, True, t_now)
            return Click() if fired else None

        self.tracker.resolve(self.name, False, t_now)
        return None

    def cancel(self, t_now: float) -> None:
        if self.tracker.owns(self.name):
            self.tracker.resolve(self.name, False, t_now)
        self.progress = 0.0


class SnapTurnGesture:
    """
    Quick head snap for history navigation.

    Needs both an absolute yaw past the back/forward threshold and a large
    yaw change since the previous frame, so a slow sustained turn (which
    scrolls) never navigates. Fires immediately, gated per direction.
    """

    def __init__(self, cfg: Cfg, dwell: AdaptiveDwellManager, cooldowns: Cooldowns):
        self.cfg = cfg
        self.dwell = dwell
        self.cooldowns = cooldowns

    def update(self, yaw: float, prev_yaw: Optional[float], t_now: float) -> Optional[Action]:
        """
        Args:
            yaw: Calibrated yaw this frame
            prev_yaw: Calibrated yaw on the previous frame (None on the first)
            t_now: Current timestamp in seconds

        Returns:
            GoBack / GoForward, or None
        """
        if prev_yaw is None:
            return None
        thresholds = self.cfg.thresholds
        if abs(yaw - prev_yaw) <= thresholds.min_yaw_change:
            return None

        if yaw < thresholds.yaw_back_left:
            action, cooldown = GoBack(), "back"
        elif yaw > thresholds.yaw_back_right:
            action, cooldown = GoForward(), "forward"
        else:
            return None

        fired = self.cooldowns.try_fire(cooldown, t_now)
        self.dwell.record_outcome(GestureType.NAVIGATION, True, 0.0, t_now)
        return action if fired else None


class TiltSwitchGesture:
    """
    Head tilt past the roll thresholds, fired immediately and repeated
    while held, limited by a shared cooldown.

    Suppressed entirely while the head is turned far enough to be a snap.
    """

    def __init__(self, cfg: Cfg, cooldowns: Cooldowns, cooldown: str,
                 dwell: Optional[AdaptiveDwellManager] = None):
        self.cfg = cfg
        self.cooldowns = cooldowns
        self.cooldown = cooldown
        self.dwell = dwell
        self._crossed = False

    def update(self, roll: float, yaw: float, t_now: float) -> Optional[str]:
        """
        Returns:
            "left" or "right" when the tilt fires, None otherwise
        """
        thresholds = self.cfg.thresholds
        if abs(yaw) > thresholds.snap_suppress_yaw:
            self._crossed = False
            return None

        sensitivity = self.cfg.sensitivity.gesture
        if roll < thresholds.roll_left / sensitivity:
            direction = "left"
        elif roll > thresholds.roll_right / sensitivity:
            direction = "right"
        else:
            self._crossed = False
            return None

        new_crossing = not self._crossed
        self._crossed = True
        fired = self.cooldowns.try_fire(self.cooldown, t_now)
        if self.dwell is not None and (fired or new_crossing):
            self.dwell.record_outcome(GestureType.TAB_SWITCH, True, 0.0, t_now)
        return direction if fired else None

    def reset(self) -> None:
        self._crossed = False
