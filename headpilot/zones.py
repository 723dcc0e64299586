"""
Zone classification: which kind of interaction the current head pose selects.
"""
from typing import Dict

from .config import ZonesConfig
from .types import Zone


class ZoneClassifier:
    """
    Maps calibrated pitch/yaw to exactly one Zone.

    Decision order is fixed so overlapping ranges resolve the same way
    every time: navigation, then scroll, then cursor, else neutral.
    """

    def __init__(self, cfg: ZonesConfig):
        self.cfg = cfg

    def classify(self, pitch: float, yaw: float) -> Zone:
        abs_pitch = abs(pitch)
        abs_yaw = abs(yaw)
        pitch_cfg, yaw_cfg = self.cfg.pitch, self.cfg.yaw

        if abs_yaw > yaw_cfg.navigation_min:
            return Zone.NAVIGATION

        if abs_pitch > pitch_cfg.scroll_min or yaw_cfg.scroll_min < abs_yaw <= yaw_cfg.navigation_min:
            return Zone.SCROLL

        if abs_pitch < pitch_cfg.cursor_max and abs_yaw < yaw_cfg.cursor_max:
            return Zone.CURSOR

        return Zone.NEUTRAL

    def intensity(self, pitch: float, yaw: float) -> Dict[str, float]:
        """
        Scroll intensity per axis in [-1, 1], signed like the pose.

        Returns:
            {"vertical": ..., "horizontal": ...}
        """
        pitch_cfg, yaw_cfg = self.cfg.pitch, self.cfg.yaw
        vertical = _ramp(abs(pitch), pitch_cfg.scroll_min, pitch_cfg.scroll_max)

        horizontal = 0.0
        if abs(yaw) <= yaw_cfg.navigation_min:
            horizontal = _ramp(abs(yaw), yaw_cfg.scroll_min, yaw_cfg.scroll_max)

        return {
            "vertical": vertical if pitch > 0 else -vertical,
            "horizontal": horizontal if yaw > 0 else -horizontal,
        }


def _ramp(value: float, start: float, end: float) -> float:
    if value <= start:
        return 0.0
    if end <= start:
        return 1.0
    return min(1.0, (value - start) / (end - start))
