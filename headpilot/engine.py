"""
Gesture engine: one synchronous tick per face frame, producing action intents.
"""
import logging
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .calibration import CalibrationManager
from .config import Cfg
from .cooldowns import Cooldowns
from .dwell import AdaptiveDwellManager
from .gestures import AttemptTracker, ClickGesture, HoldGesture, SnapTurnGesture, TiltSwitchGesture
from .mode import ModeController
from .pose import Point, gaze_point, normalize
from .text_field import TextFieldController
from .types import (
    Action, CloseTab, DisableTextFieldMode, EnableTextFieldMode, Expression,
    ExpressionScores, FatigueState, GestureType, Mode, MoveCursor, NewTab,
    NextTab, PoseSample, PreviousTab, Refresh, Scroll, Zone,
)
from .zones import ZoneClassifier

logger = logging.getLogger(__name__)

_CONTINUOUS = (MoveCursor, Scroll)


class GestureEngine:
    """
    Owns every piece of mutable gesture state and runs the per-frame tick.

    Tick order: calibration gate, mode controller, zone classifier,
    gesture detectors, text-field sub-controller, continuous cursor/scroll.
    A mode change made early in a tick is visible to everything after it.
    """

    def __init__(self, cfg: Cfg, store=None):
        """Initialize the engine with configuration and optional persistence."""
        self.cfg = cfg
        self.store = store
        self.enabled = True

        self.cooldowns = Cooldowns(cfg.cooldowns)
        self.calibration = CalibrationManager(cfg.calibration, store)
        self.zones = ZoneClassifier(cfg.zones)
        self.dwell = AdaptiveDwellManager(cfg.dwell, store, zones=cfg.zones)
        self.mode_controller = ModeController(cfg, self.cooldowns)
        self.tracker = AttemptTracker(self.dwell)

        self.click = ClickGesture(cfg, self.tracker, self.cooldowns)
        self.snap = SnapTurnGesture(cfg, self.dwell, self.cooldowns)
        self.tab_tilt = TiltSwitchGesture(cfg, self.cooldowns, "tab_switch", dwell=self.dwell)
        self.smile = self._hold("smile", GestureType.SMILE, NewTab, "new_tab")
        self.wink_left = self._hold("wink_left", GestureType.WINK, Refresh, "refresh")
        self.wink_right = self._hold("wink_right", GestureType.WINK, CloseTab, "close_tab")
        self.text_field = TextFieldController(cfg, self.tracker, self.cooldowns)

        self._zone = Zone.NEUTRAL
        self._last_pose: Optional[PoseSample] = None
        self._prev_yaw: Optional[float] = None
        self._last_t: Optional[float] = None
        self._in_tick = False

    def _hold(self, name: str, gesture_type: GestureType, action, cooldown: str) -> HoldGesture:
        return HoldGesture(
            name=name,
            gesture_type=gesture_type,
            action=action,
            cooldown=cooldown,
            tracker=self.tracker,
            cooldowns=self.cooldowns,
            dwell_ms=lambda t_now: self.dwell.dwell_for(gesture_type, t_now),
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return self.mode_controller.mode

    @property
    def zone(self) -> Zone:
        return self._zone

    @property
    def last_pose(self) -> Optional[PoseSample]:
        return self._last_pose

    @property
    def fatigue(self) -> FatigueState:
        return self.dwell.fatigue

    @property
    def progress(self) -> Dict[str, float]:
        """Progress (0..1) of every hold-style detector, for feedback overlays."""
        t_now = self._last_t if self._last_t is not None else 0.0
        return {
            "calibration": self.calibration.progress,
            "click": self.click.progress,
            "smile": self.smile.progress,
            "wink_left": self.wink_left.progress,
            "wink_right": self.wink_right.progress,
            "confirm_edit": self.text_field.confirm.progress,
            "field_hover": self.text_field.hover_fraction(t_now),
        }

    def statistics(self) -> Dict[str, Dict[str, float]]:
        return self.dwell.statistics()

    # ------------------------------------------------------------------
    # Control surface
    # ------------------------------------------------------------------

    def enable(self) -> None:
        self.enabled = True
        logger.info("Gesture control enabled")

    def disable(self, t_now: float) -> List[Action]:
        """
        Stop processing: resolve open attempts as failures, end any text-field
        session and drop back to Neutral.

        Returns:
            DisableTextFieldMode if a text-field session was open
        """
        actions: List[Action] = []
        self._cancel_gestures(t_now)
        if self.text_field.active:
            self.text_field.end(t_now)
            actions.append(DisableTextFieldMode())
        self.tracker.cancel(t_now)
        self.mode_controller.reset(t_now)
        self.enabled = False
        self._prev_yaw = None
        logger.info("Gesture control disabled")
        return actions

    def recalibrate(self, t_now: float) -> None:
        """Drop open attempts as failures and start collecting a new baseline."""
        self._cancel_gestures(t_now)
        self.tracker.cancel(t_now)
        self.calibration.reset()
        self._prev_yaw = None

    def skip_calibration(self) -> None:
        self.calibration.skip()

    def set_text_field_count(self, count: int) -> None:
        self.text_field.set_field_count(count)

    def show_edit_options(self) -> None:
        self.text_field.show_edit_options()

    def hide_edit_options(self) -> None:
        self.text_field.hide_edit_options()

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def process_frame(self, landmarks: Optional[Sequence[Point]],
                      scores: Union[ExpressionScores, Mapping[str, float], None],
                      t_now: float) -> List[Action]:
        """
        Process one face frame.

        Args:
            landmarks: Face mesh points (None if no face detected)
            scores: Expression scores for this frame
            t_now: Current monotonic timestamp in seconds

        Returns:
            Action intents to hand to the executor, in emission order
        """
        if self._in_tick:
            raise RuntimeError("process_frame called while another frame is still being processed")
        self._in_tick = True
        try:
            if not isinstance(scores, ExpressionScores):
                scores = ExpressionScores(scores)
            return self._tick(landmarks, scores, t_now)
        finally:
            self._in_tick = False

    def _tick(self, landmarks: Optional[Sequence[Point]], scores: ExpressionScores,
              t_now: float) -> List[Action]:
        if not self.enabled:
            return []

        # While pending the baseline is zero, so this is the raw pose
        pose = normalize(landmarks, self.calibration.baseline, t_now)
        if pose is None:
            return []
        self._last_t = t_now

        if self.calibration.pending:
            self.calibration.observe(pose)
            self._prev_yaw = None
            return []

        self._last_pose = pose
        actions: List[Action] = []

        previous_mode = self.mode_controller.mode
        mode = self.mode_controller.update(scores, t_now)
        if mode is not previous_mode:
            actions.extend(self._on_mode_change(previous_mode, mode, t_now))

        self._zone = self.zones.classify(pose.pitch, pose.yaw)

        actions.extend(self._detect_gestures(pose, scores, mode, self._zone, t_now))

        if mode is Mode.TEXT_FIELD:
            smile = max(scores[Expression.SMILE_LEFT], scores[Expression.SMILE_RIGHT])
            actions.extend(self.text_field.update(pose, smile, t_now))

        actions.extend(self._continuous(pose, mode, self._zone))

        self._prev_yaw = pose.yaw

        for action in actions:
            if not isinstance(action, _CONTINUOUS):
                logger.info("Action: %s", action)
        return actions

    def _on_mode_change(self, previous: Mode, mode: Mode, t_now: float) -> List[Action]:
        actions: List[Action] = []
        if previous is Mode.TEXT_FIELD:
            self.text_field.end(t_now)
            actions.append(DisableTextFieldMode())
        if mode is Mode.TEXT_FIELD:
            self._cancel_gestures(t_now)
            self.text_field.begin()
            actions.append(EnableTextFieldMode())
        return actions

    def _detect_gestures(self, pose: PoseSample, scores: ExpressionScores, mode: Mode,
                         zone: Zone, t_now: float) -> List[Action]:
        actions: List[Action] = []
        thresholds = self.cfg.thresholds
        sensitivity = self.cfg.sensitivity.gesture

        # Click is the only discrete gesture available outside gesture mode
        click_eligible = mode is Mode.NEUTRAL and zone is not Zone.NAVIGATION
        click = self.click.update(scores[Expression.JAW_OPEN], click_eligible, t_now)
        if click is not None:
            actions.append(click)

        gesture_mode = mode is Mode.GESTURE_ACTIVE
        executed: List[Action] = []

        if gesture_mode:
            snap = self.snap.update(pose.yaw, self._prev_yaw, t_now)
            if snap is not None:
                executed.append(snap)

        eligible = gesture_mode and zone is not Zone.NAVIGATION

        left = scores[Expression.BLINK_LEFT]
        right = scores[Expression.BLINK_RIGHT]
        wink = thresholds.wink / sensitivity
        left_wink = eligible and left > wink and right < thresholds.wink_other_max
        right_wink = eligible and right > wink and left < thresholds.wink_other_max
        smiling = eligible and max(scores[Expression.SMILE_LEFT],
                                   scores[Expression.SMILE_RIGHT]) > thresholds.smile / sensitivity

        for detector, active in ((self.wink_left, left_wink),
                                 (self.wink_right, right_wink),
                                 (self.smile, smiling)):
            action = detector.update(active, t_now)
            if action is not None:
                executed.append(action)

        if eligible:
            direction = self.tab_tilt.update(pose.roll, pose.yaw, t_now)
            if direction == "left":
                executed.append(NextTab())
            elif direction == "right":
                executed.append(PreviousTab())
        else:
            self.tab_tilt.reset()

        if executed:
            self.mode_controller.extend(t_now)
        actions.extend(executed)
        return actions

    def _continuous(self, pose: PoseSample, mode: Mode, zone: Zone) -> List[Action]:
        if zone is Zone.CURSOR:
            x, y = gaze_point(pose, self.cfg.cursor.yaw_gain, self.cfg.cursor.pitch_gain,
                              self.cfg.sensitivity.cursor_speed)
            return [MoveCursor(x=x, y=y)]

        if zone is Zone.SCROLL and mode is Mode.NEUTRAL:
            intensity = self.zones.intensity(pose.pitch, pose.yaw)
            gain = self.cfg.scroll.max_speed * self.cfg.sensitivity.scroll
            delta_x = intensity["horizontal"] * gain
            delta_y = intensity["vertical"] * gain
            min_delta = self.cfg.scroll.min_delta
            if abs(delta_x) > min_delta or abs(delta_y) > min_delta:
                return [Scroll(delta_x=delta_x, delta_y=delta_y)]
        return []

    def _cancel_gestures(self, t_now: float) -> None:
        for detector in (self.click, self.smile, self.wink_left, self.wink_right):
            detector.cancel(t_now)
        self.tab_tilt.reset()
