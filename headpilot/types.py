"""
Type definitions for the head-pose gesture engine.
"""
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional, Protocol, Tuple, Union, runtime_checkable


class Zone(str, Enum):
    """Interaction zone selected by the current head pose."""
    CURSOR = "cursor"
    SCROLL = "scroll"
    NAVIGATION = "navigation"
    NEUTRAL = "neutral"


class Mode(str, Enum):
    """Process-wide interaction mode."""
    NEUTRAL = "neutral"
    GESTURE_ACTIVE = "gesture_active"
    TEXT_FIELD = "text_field"


class FatigueState(str, Enum):
    """Classification of recent gesture performance."""
    NORMAL = "normal"
    FATIGUED = "fatigued"
    CONFIDENT = "confident"


class DwellContext(str, Enum):
    """Context used to scale a dwell time."""
    NORMAL = "normal"
    HIGH_RISK = "high_risk"
    LOW_RISK = "low_risk"
    FATIGUED = "fatigued"
    CONFIDENT = "confident"


class GestureType(str, Enum):
    """Gesture families tracked by the adaptive dwell-time manager."""
    CLICK = "click"
    SMILE = "smile"
    WINK = "wink"
    NAVIGATION = "navigation"
    TAB_SWITCH = "tab_switch"


class EditOption(int, Enum):
    """Post-dictation edit choices, in display order."""
    KEEP = 0
    FIX = 1
    REWRITE = 2


class Expression(str, Enum):
    """Recognised blendshape names (MediaPipe Face Landmarker vocabulary)."""
    SMILE_LEFT = "mouthSmileLeft"
    SMILE_RIGHT = "mouthSmileRight"
    BLINK_LEFT = "eyeBlinkLeft"
    BLINK_RIGHT = "eyeBlinkRight"
    JAW_OPEN = "jawOpen"
    BROW_INNER_UP = "browInnerUp"
    BROW_OUTER_UP_LEFT = "browOuterUpLeft"
    BROW_OUTER_UP_RIGHT = "browOuterUpRight"


_EXPRESSION_VALUES = {e.value: e for e in Expression}


class ExpressionScores:
    """
    Read-only mapping from Expression to a score in [0, 1].

    Unknown names are dropped on construction and any expression that was
    not supplied reads as 0.0.
    """

    __slots__ = ("_scores",)

    def __init__(self, scores: Optional[Mapping[Union[str, Expression], float]] = None):
        parsed = {}
        for name, value in (scores or {}).items():
            key = name if isinstance(name, Expression) else _EXPRESSION_VALUES.get(name)
            if key is None:
                continue
            try:
                parsed[key] = min(1.0, max(0.0, float(value)))
            except (TypeError, ValueError):
                continue
        self._scores = MappingProxyType(parsed)

    def __getitem__(self, name: Expression) -> float:
        return self._scores.get(name, 0.0)

    def get(self, name: Expression) -> float:
        return self._scores.get(name, 0.0)

    def __repr__(self) -> str:
        items = ", ".join(f"{k.value}={v:.2f}" for k, v in self._scores.items())
        return f"ExpressionScores({items})"


@dataclass(frozen=True)
class NeutralBaseline:
    """Neutral head pose subtracted from every raw pose."""
    pitch: float = 0.0
    yaw: float = 0.0
    roll: float = 0.0


@dataclass(frozen=True)
class PoseSample:
    """Calibrated head pose for one frame."""
    pitch: float  # degrees, positive = looking down
    yaw: float  # degrees, positive = turned right
    roll: float  # degrees, positive = tilted right
    timestamp: float  # monotonic seconds
    eye_center: Tuple[float, float] = (0.5, 0.5)  # normalized image coords


@dataclass
class GestureAttempt:
    """An outstanding gesture attempt."""
    gesture_type: GestureType
    start_time: float
    stage: int = 1
    owner: str = ""
    armed_at: Optional[float] = None  # when stage 2 was reached


# ===== ACTION INTENTS =====

@dataclass(frozen=True)
class Scroll:
    """Scroll the page by a pixel delta."""
    delta_x: float
    delta_y: float


@dataclass(frozen=True)
class MoveCursor:
    """Move the virtual cursor to normalized (0..1) coordinates."""
    x: float
    y: float


@dataclass(frozen=True)
class Click:
    """Click at the cursor."""


@dataclass(frozen=True)
class GoBack:
    """Navigate back in history."""


@dataclass(frozen=True)
class GoForward:
    """Navigate forward in history."""


@dataclass(frozen=True)
class NewTab:
    """Open a new tab."""


@dataclass(frozen=True)
class CloseTab:
    """Close the active tab."""


@dataclass(frozen=True)
class Refresh:
    """Reload the active tab."""


@dataclass(frozen=True)
class NextTab:
    """Activate the next tab."""


@dataclass(frozen=True)
class PreviousTab:
    """Activate the previous tab."""


@dataclass(frozen=True)
class EnableTextFieldMode:
    """Enter text-field navigation; the executor replies with the field count."""


@dataclass(frozen=True)
class DisableTextFieldMode:
    """Leave text-field navigation."""


@dataclass(frozen=True)
class NextTextField:
    """Move the field (or edit-option) highlight forward."""
    index: int


@dataclass(frozen=True)
class PreviousTextField:
    """Move the field (or edit-option) highlight backward."""
    index: int


@dataclass(frozen=True)
class SelectTextField:
    """Focus the highlighted field."""
    index: int


@dataclass(frozen=True)
class ConfirmEditOption:
    """Apply the chosen post-dictation edit option."""
    option: EditOption = field(default=EditOption.KEEP)


Action = Union[
    Scroll, MoveCursor, Click, GoBack, GoForward, NewTab, CloseTab, Refresh,
    NextTab, PreviousTab, EnableTextFieldMode, DisableTextFieldMode,
    NextTextField, PreviousTextField, SelectTextField, ConfirmEditOption,
]


@runtime_checkable
class ControllerProto(Protocol):
    """Abstract protocol for controllers that execute action intents."""

    async def scroll(self, delta_x: float, delta_y: float) -> None:
        ...

    async def move_cursor(self, x: float, y: float) -> None:
        ...

    async def click(self) -> None:
        ...

    async def go_back(self) -> None:
        ...

    async def go_forward(self) -> None:
        ...

    async def new_tab(self) -> None:
        ...

    async def close_tab(self) -> None:
        ...

    async def refresh(self) -> None:
        ...

    async def next_tab(self) -> None:
        ...

    async def previous_tab(self) -> None:
        ...

    async def enable_text_field_mode(self) -> int:
        """Enter text-field mode and return the number of editable fields."""
        ...

    async def disable_text_field_mode(self) -> None:
        ...

    async def next_text_field(self, index: int) -> None:
        ...

    async def previous_text_field(self, index: int) -> None:
        ...

    async def select_text_field(self, index: int) -> None:
        ...

    async def confirm_edit_option(self, option: EditOption) -> None:
        ...
