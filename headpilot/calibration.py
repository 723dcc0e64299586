"""
Neutral head-pose calibration.
"""
import logging
from typing import List, Optional, Tuple

import numpy as np

from .config import CalibrationConfig
from .types import NeutralBaseline, PoseSample

logger = logging.getLogger(__name__)


class CalibrationManager:
    """
    Establishes the user's neutral pose by averaging samples over a fixed
    window, then persists it.

    While calibration is pending every frame is consumed here and the rest
    of the engine does nothing for that frame.
    """

    def __init__(self, cfg: CalibrationConfig, store=None):
        self.cfg = cfg
        self.store = store
        self.baseline = NeutralBaseline()
        self.pending = True
        self._samples: List[Tuple[float, float, float]] = []
        self._start_time: Optional[float] = None
        self._last_time = 0.0

        if store is not None:
            saved = store.load_baseline()
            if saved is not None:
                self.baseline = saved
                self.pending = False
                logger.info("Loaded neutral position: %s", saved)

    @property
    def progress(self) -> float:
        """Fraction of the calibration window elapsed (1.0 once complete)."""
        if not self.pending:
            return 1.0
        if self._start_time is None or not self._samples:
            return 0.0
        return 0.0 if self.cfg.duration_ms <= 0 else min(1.0, self._elapsed_ms() / self.cfg.duration_ms)

    def observe(self, pose: PoseSample) -> bool:
        """
        Feed one uncalibrated pose.

        Returns:
            True on the frame that completes calibration
        """
        if not self.pending:
            return False

        if self._start_time is None:
            self._start_time = pose.timestamp
            logger.info("Starting neutral position calibration...")

        self._samples.append((pose.pitch, pose.yaw, pose.roll))
        self._last_time = pose.timestamp

        if self._elapsed_ms() < self.cfg.duration_ms or len(self._samples) < self.cfg.min_samples:
            return False

        pitch, yaw, roll = np.mean(np.asarray(self._samples, dtype=float), axis=0)
        self.baseline = NeutralBaseline(pitch=float(pitch), yaw=float(yaw), roll=float(roll))
        self.pending = False
        self._samples = []
        self._start_time = None
        logger.info("Neutral position calibrated: pitch=%.1f yaw=%.1f roll=%.1f",
                    self.baseline.pitch, self.baseline.yaw, self.baseline.roll)

        if self.store is not None:
            self.store.save_baseline(self.baseline)
        return True

    def reset(self) -> None:
        """Forget the baseline and start calibrating again."""
        self.baseline = NeutralBaseline()
        self.pending = True
        self._samples = []
        self._start_time = None
        if self.store is not None:
            self.store.clear_baseline()
        logger.info("Neutral position reset; look straight ahead to recalibrate")

    def skip(self) -> None:
        """Use a zero baseline and stop waiting for samples."""
        self.baseline = NeutralBaseline()
        self.pending = False
        self._samples = []
        self._start_time = None

    def _elapsed_ms(self) -> float:
        return (self._last_time - self._start_time) * 1000.0
