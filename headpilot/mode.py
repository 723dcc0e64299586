"""
Mode controller: the wake/sleep state machine that gates gesture detection.
"""
import logging
from typing import Optional

from .config import Cfg
from .cooldowns import Cooldowns
from .types import Expression, ExpressionScores, Mode

logger = logging.getLogger(__name__)


class ModeController:
    """
    Neutral -> GestureActive -> TextField state machine.

    Features:
    - Double blink wakes gesture mode (or refreshes an active window)
    - Activation window that expires unless extended by executed gestures
    - Edge-triggered eyebrow raise toggles the text-field sub-mode
    - TextField has no timeout; leaving it grants a fresh window
    """

    def __init__(self, cfg: Cfg, cooldowns: Cooldowns):
        self.cfg = cfg
        self.cooldowns = cooldowns
        self.mode = Mode.NEUTRAL
        self.activated_at: Optional[float] = None
        self.last_transition: Optional[float] = None

        self._blink_latched = False
        self._last_blink_onset: Optional[float] = None
        self._brow_latched = False

    def update(self, scores: ExpressionScores, t_now: float) -> Mode:
        """
        Evaluate one frame of expression scores.

        Args:
            scores: Expression scores for this frame
            t_now: Current timestamp in seconds

        Returns:
            The mode after this frame
        """
        self._check_expiry(t_now)

        if self._double_blink(scores, t_now):
            if self.mode is Mode.NEUTRAL:
                self._transition(Mode.GESTURE_ACTIVE, t_now)
                self.activated_at = t_now
            elif self.mode is Mode.GESTURE_ACTIVE:
                self.activated_at = t_now
                logger.info("Gesture mode refreshed")

        if self._eyebrow_raised(scores, t_now):
            if self.mode is Mode.GESTURE_ACTIVE:
                self._transition(Mode.TEXT_FIELD, t_now)
            elif self.mode is Mode.TEXT_FIELD:
                self._transition(Mode.GESTURE_ACTIVE, t_now)
                self.activated_at = t_now

        return self.mode

    def extend(self, t_now: float) -> None:
        """Restart the activation window after an executed gesture."""
        if self.mode is Mode.GESTURE_ACTIVE:
            self.activated_at = t_now

    def remaining_ms(self, t_now: float) -> float:
        if self.mode is not Mode.GESTURE_ACTIVE or self.activated_at is None:
            return 0.0
        return max(0.0, self.cfg.mode.activation_ms - (t_now - self.activated_at) * 1000.0)

    def reset(self, t_now: float) -> None:
        """Force Neutral, e.g. when control is disabled."""
        if self.mode is not Mode.NEUTRAL:
            self._transition(Mode.NEUTRAL, t_now)
        self.activated_at = None
        self._last_blink_onset = None

    def _check_expiry(self, t_now: float) -> None:
        if self.mode is not Mode.GESTURE_ACTIVE or self.activated_at is None:
            return
        if (t_now - self.activated_at) * 1000.0 >= self.cfg.mode.activation_ms:
            self._transition(Mode.NEUTRAL, t_now)
            self.activated_at = None

    def _double_blink(self, scores: ExpressionScores, t_now: float) -> bool:
        mode_cfg = self.cfg.mode
        left = scores[Expression.BLINK_LEFT]
        right = scores[Expression.BLINK_RIGHT]

        if self._blink_latched:
            if left < mode_cfg.blink_release and right < mode_cfg.blink_release:
                self._blink_latched = False
            return False

        if left <= mode_cfg.blink_threshold or right <= mode_cfg.blink_threshold:
            return False

        # Blink onset
        self._blink_latched = True
        previous = self._last_blink_onset
        self._last_blink_onset = t_now
        if previous is None:
            return False

        gap_ms = (t_now - previous) * 1000.0
        if mode_cfg.double_blink_min_gap_ms < gap_ms < mode_cfg.double_blink_max_gap_ms:
            logger.debug("Double blink detected (gap %.0fms)", gap_ms)
            self._last_blink_onset = None
            return True
        return False

    def _eyebrow_raised(self, scores: ExpressionScores, t_now: float) -> bool:
        thresholds = self.cfg.thresholds
        sensitivity = self.cfg.sensitivity.gesture
        average = (scores[Expression.BROW_INNER_UP]
                   + scores[Expression.BROW_OUTER_UP_LEFT]
                   + scores[Expression.BROW_OUTER_UP_RIGHT]) / 3

        if self._brow_latched:
            if average < thresholds.eyebrow_release / sensitivity:
                self._brow_latched = False
            return False

        if average <= thresholds.eyebrow_raise / sensitivity:
            return False

        self._brow_latched = True
        if self.mode is Mode.NEUTRAL:
            return False
        return self.cooldowns.try_fire("eyebrow_raise", t_now)

    def _transition(self, new_mode: Mode, t_now: float) -> None:
        logger.info("Mode: %s -> %s", self.mode.value, new_mode.value)
        self.mode = new_mode
        self.last_transition = t_now
