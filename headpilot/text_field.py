"""
Text-field navigation sub-mode: tilt to move between fields, dwell to
select, smile to confirm a post-dictation edit option.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional

from .config import Cfg
from .cooldowns import Cooldowns
from .gestures import AttemptTracker, HoldGesture, TiltSwitchGesture
from .types import (
    Action, ConfirmEditOption, EditOption, GestureType, NextTextField,
    PoseSample, PreviousTextField, SelectTextField,
)

logger = logging.getLogger(__name__)


@dataclass
class TextFieldSession:
    """State that only exists while the text-field sub-mode is active."""
    field_count: int = 0
    current_index: int = -1
    hover_start: Optional[float] = None
    options_shown: bool = False
    option_index: int = 0


class TextFieldController:
    """Drives a TextFieldSession from pose and smile input."""

    def __init__(self, cfg: Cfg, tracker: AttemptTracker, cooldowns: Cooldowns):
        self.cfg = cfg
        self.session: Optional[TextFieldSession] = None
        self.tilt = TiltSwitchGesture(cfg, cooldowns, "text_field_switch")
        self.confirm = HoldGesture(
            name="confirm_edit",
            gesture_type=GestureType.SMILE,
            action=self._confirm_action,
            cooldown="confirm_edit",
            tracker=tracker,
            cooldowns=cooldowns,
            dwell_ms=lambda t_now: float(cfg.text_field.confirm_hold_ms),
            record=False,
        )

    @property
    def active(self) -> bool:
        return self.session is not None

    def begin(self) -> None:
        self.session = TextFieldSession()
        self.tilt.reset()

    def end(self, t_now: float) -> None:
        self.confirm.cancel(t_now)
        self.session = None

    def set_field_count(self, count: int) -> None:
        if self.session is not None:
            self.session.field_count = max(0, int(count))
            logger.info("Found %d editable text fields", self.session.field_count)

    def show_edit_options(self) -> None:
        if self.session is not None:
            self.session.options_shown = True
            self.session.option_index = EditOption.KEEP.value

    def hide_edit_options(self) -> None:
        if self.session is not None:
            self.session.options_shown = False

    def update(self, pose: PoseSample, smile: float, t_now: float) -> List[Action]:
        """
        Process one frame while in text-field mode.

        Args:
            pose: Calibrated pose
            smile: max(mouthSmileLeft, mouthSmileRight)
            t_now: Current timestamp in seconds

        Returns:
            Actions produced this frame
        """
        session = self.session
        if session is None:
            return []

        actions: List[Action] = []
        direction = self.tilt.update(pose.roll, pose.yaw, t_now)
        step = {"left": 1, "right": -1}.get(direction, 0)

        if session.options_shown:
            option_count = self.cfg.text_field.option_count
            if step:
                session.option_index = (session.option_index + step) % option_count
                move = NextTextField if step > 0 else PreviousTextField
                actions.append(move(index=session.option_index))

            smiling = smile > self.cfg.thresholds.smile / self.cfg.sensitivity.gesture
            action = self.confirm.update(smiling, t_now)
            if action is not None:
                actions.append(action)
                session.options_shown = False
            return actions

        self.confirm.cancel(t_now)

        if step and session.field_count > 0:
            index = session.current_index + step
            if index >= session.field_count:
                index = 0
            elif index < 0:
                index = session.field_count - 1
            session.current_index = index
            session.hover_start = t_now
            move = NextTextField if step > 0 else PreviousTextField
            actions.append(move(index=index))
            logger.debug("Field %d/%d", index + 1, session.field_count)

        if session.current_index >= 0 and session.hover_start is not None:
            if (t_now - session.hover_start) * 1000.0 >= self.cfg.text_field.hover_ms:
                session.hover_start = None
                actions.append(SelectTextField(index=session.current_index))
                logger.info("Text field %d selected", session.current_index + 1)

        return actions

    def hover_fraction(self, t_now: float) -> float:
        session = self.session
        if session is None or session.hover_start is None or self.cfg.text_field.hover_ms <= 0:
            return 0.0
        return min(1.0, (t_now - session.hover_start) * 1000.0 / self.cfg.text_field.hover_ms)

    def _confirm_action(self) -> ConfirmEditOption:
        option = EditOption(self.session.option_index) if self.session is not None else EditOption.KEEP
        logger.info("Edit option confirmed: %s", option.name.lower())
        return ConfirmEditOption(option=option)
