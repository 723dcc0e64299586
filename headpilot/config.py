"""
Configuration management for the head-pose gesture engine.
"""
import copy
import yaml
from pathlib import Path
from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field

from .types import GestureType


DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.default.yaml"


@dataclass
class CameraConfig:
    """Camera configuration settings."""
    index: int
    width: int
    height: int
    fps: int


@dataclass
class MediaPipeConfig:
    """MediaPipe Face Landmarker configuration settings."""
    model_path: str
    num_faces: int
    min_detection_confidence: float
    min_tracking_confidence: float


@dataclass
class CalibrationConfig:
    """Neutral-pose calibration window."""
    duration_ms: int
    min_samples: int


@dataclass
class ModeConfig:
    """Wake gesture and activation window."""
    activation_ms: int
    blink_threshold: float
    blink_release: float
    double_blink_min_gap_ms: int
    double_blink_max_gap_ms: int


@dataclass
class ThresholdsConfig:
    """Pose and expression thresholds before sensitivity scaling."""
    yaw_back_left: float
    yaw_back_right: float
    roll_left: float
    roll_right: float
    min_yaw_change: float
    snap_suppress_yaw: float
    smile: float
    wink: float
    wink_other_max: float
    jaw_open: float
    eyebrow_raise: float
    eyebrow_release: float


@dataclass
class ClickConfig:
    """Two-stage mouth-open click timing."""
    hold_ms: int
    close_window_ms: int  # measured from the moment the mouth opened


@dataclass
class PitchZone:
    """Pitch bounds for the zone classifier."""
    scroll_min: float
    scroll_max: float
    cursor_max: float


@dataclass
class YawZone:
    """Yaw bounds for the zone classifier."""
    scroll_min: float
    scroll_max: float
    cursor_max: float
    navigation_min: float


@dataclass
class ZonesConfig:
    """Zone classifier thresholds."""
    pitch: PitchZone
    yaw: YawZone


@dataclass
class DwellMultipliers:
    """Context multipliers applied to dwell times."""
    high_risk: float
    low_risk: float
    fatigued: float
    confident: float


@dataclass
class DwellConfig:
    """Adaptive dwell-time settings."""
    base_ms: Dict[GestureType, float]
    min_ms: float
    max_ms: float
    adaptation_rate: float
    multipliers: DwellMultipliers
    high_risk: List[GestureType]
    max_successes: int
    max_failures: int
    fatigue_window_ms: int
    fatigue_check_ms: int


@dataclass
class CooldownsConfig:
    """Per-action cooldowns in milliseconds."""
    click: int
    refresh: int
    close_tab: int
    new_tab: int
    tab_switch: int
    back: int
    forward: int
    text_field_switch: int
    eyebrow_raise: int
    confirm_edit: int


@dataclass
class SensitivityConfig:
    """User sensitivity multipliers (1.0 = 100%)."""
    scroll: float
    click: float
    gesture: float
    cursor_speed: float


@dataclass
class ScrollConfig:
    """Continuous scroll output."""
    max_speed: float
    min_delta: float


@dataclass
class CursorConfig:
    """Continuous cursor output."""
    yaw_gain: float
    pitch_gain: float


@dataclass
class TextFieldConfig:
    """Text-field navigation sub-mode."""
    hover_ms: int
    confirm_hold_ms: int
    option_count: int


@dataclass
class StorageConfig:
    """Where persisted state lives."""
    directory: str
    stale_after_days: float


@dataclass
class DisplayConfig:
    """Display configuration settings."""
    show_landmarks: bool
    window_name: str


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str


@dataclass
class Cfg:
    """Main configuration class."""
    camera: CameraConfig
    mediapipe: MediaPipeConfig
    calibration: CalibrationConfig
    mode: ModeConfig
    thresholds: ThresholdsConfig
    click: ClickConfig
    zones: ZonesConfig
    dwell: DwellConfig
    cooldowns: CooldownsConfig
    sensitivity: SensitivityConfig
    scroll: ScrollConfig
    cursor: CursorConfig
    text_field: TextFieldConfig
    storage: StorageConfig
    display: DisplayConfig
    logging: LoggingConfig = field(default_factory=lambda: LoggingConfig(level="INFO"))


def load_config(path: Optional[str] = None) -> Cfg:
    """
    Load configuration from YAML file.

    The packaged defaults are always read first; a user file only needs to
    contain the keys it overrides.

    Args:
        path: Path to config file. If None, only the defaults are used

    Returns:
        Configuration object with all settings
    """
    with open(DEFAULT_CONFIG_PATH, 'r') as f:
        data = yaml.safe_load(f)

    if path is not None:
        config_path = Path(path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        with open(config_path, 'r') as f:
            overrides = yaml.safe_load(f) or {}
        data = _merge(data, overrides)

    return _dict_to_config(data)


def _merge(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively overlay overrides on base."""
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _dict_to_config(data: Dict[str, Any]) -> Cfg:
    """Convert dictionary to configuration object."""
    camera_data = data['camera']
    camera = CameraConfig(
        index=camera_data['index'],
        width=camera_data['width'],
        height=camera_data['height'],
        fps=camera_data['fps']
    )

    mp_data = data['mediapipe']
    mediapipe = MediaPipeConfig(
        model_path=mp_data['model_path'],
        num_faces=mp_data['num_faces'],
        min_detection_confidence=mp_data['min_detection_confidence'],
        min_tracking_confidence=mp_data['min_tracking_confidence']
    )

    calibration = CalibrationConfig(**data['calibration'])
    mode = ModeConfig(**data['mode'])
    thresholds = ThresholdsConfig(**data['thresholds'])
    click = ClickConfig(**data['click'])

    zones = zones_from_dict(data['zones'])

    dwell_data = data['dwell']
    dwell = DwellConfig(
        base_ms={GestureType(k): float(v) for k, v in dwell_data['base_ms'].items()},
        min_ms=float(dwell_data['min_ms']),
        max_ms=float(dwell_data['max_ms']),
        adaptation_rate=dwell_data['adaptation_rate'],
        multipliers=DwellMultipliers(**dwell_data['multipliers']),
        high_risk=[GestureType(g) for g in dwell_data['high_risk']],
        max_successes=dwell_data['max_successes'],
        max_failures=dwell_data['max_failures'],
        fatigue_window_ms=dwell_data['fatigue_window_ms'],
        fatigue_check_ms=dwell_data['fatigue_check_ms']
    )

    cooldowns = CooldownsConfig(**data['cooldowns_ms'])
    sensitivity = SensitivityConfig(**data['sensitivity'])
    scroll = ScrollConfig(**data['scroll'])
    cursor = CursorConfig(**data['cursor'])
    text_field = TextFieldConfig(**data['text_field'])
    storage = StorageConfig(**data['storage'])

    display_data = data['display']
    display = DisplayConfig(
        show_landmarks=display_data['show_landmarks'],
        window_name=display_data['window_name']
    )

    logging_cfg = LoggingConfig(level=data.get('logging', {}).get('level', 'INFO'))

    return Cfg(
        camera=camera,
        mediapipe=mediapipe,
        calibration=calibration,
        mode=mode,
        thresholds=thresholds,
        click=click,
        zones=zones,
        dwell=dwell,
        cooldowns=cooldowns,
        sensitivity=sensitivity,
        scroll=scroll,
        cursor=cursor,
        text_field=text_field,
        storage=storage,
        display=display,
        logging=logging_cfg
    )


def zones_from_dict(data: Dict[str, Any]) -> ZonesConfig:
    """Build zone thresholds from a plain dict (config file or persisted state)."""
    return ZonesConfig(
        pitch=PitchZone(**data['pitch']),
        yaw=YawZone(**data['yaw'])
    )
