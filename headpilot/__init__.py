"""
HeadPilot

Hands-free browser control from head pose and facial expressions. Reads
face landmarks and blendshapes from MediaPipe, turns them into debounced
action intents and hands those to a browser controller.
"""

__version__ = "0.1.0"

from .types import (
    Action, ControllerProto, EditOption, Expression, ExpressionScores,
    FatigueState, GestureType, Mode, NeutralBaseline, PoseSample, Zone,
)
from .config import load_config, Cfg
from .engine import GestureEngine
from .dispatch import dispatch
from .storage import JsonStateStore
from .controller_mock import MockController

__all__ = [
    "Action",
    "ControllerProto",
    "EditOption",
    "Expression",
    "ExpressionScores",
    "FatigueState",
    "GestureType",
    "Mode",
    "NeutralBaseline",
    "PoseSample",
    "Zone",
    "load_config",
    "Cfg",
    "GestureEngine",
    "dispatch",
    "JsonStateStore",
    "MockController",
]
