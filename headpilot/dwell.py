"""
Adaptive dwell times driven by each gesture's success/failure history.
"""
import logging
from collections import deque
from dataclasses import asdict, dataclass
from typing import Any, Deque, Dict, Optional

from .config import DwellConfig, PitchZone, YawZone, ZonesConfig
from .types import DwellContext, FatigueState, GestureType

logger = logging.getLogger(__name__)


@dataclass
class HistoryRecord:
    """Outcome of one resolved gesture attempt."""
    timestamp: Optional[float]  # None for records restored from disk
    duration: float  # ms
    successful: bool


class GestureHistory:
    """Bounded success/failure history for one gesture type."""

    def __init__(self, max_successes: int, max_failures: int, average_time: float):
        self.successes: Deque[HistoryRecord] = deque(maxlen=max_successes)
        self.failures: Deque[HistoryRecord] = deque(maxlen=max_failures)
        self.average_time = average_time

    @property
    def attempts(self) -> int:
        return len(self.successes) + len(self.failures)

    @property
    def success_rate(self) -> float:
        return len(self.successes) / self.attempts if self.attempts else 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "successes": [{"duration": r.duration, "successful": True} for r in self.successes],
            "failures": [{"duration": r.duration, "successful": False} for r in self.failures],
            "average_time": self.average_time,
        }

    def restore(self, data: Dict[str, Any]) -> None:
        self.successes.clear()
        self.failures.clear()
        for item in data.get("successes", []):
            self.successes.append(HistoryRecord(None, float(item["duration"]), True))
        for item in data.get("failures", []):
            self.failures.append(HistoryRecord(None, float(item["duration"]), False))
        self.average_time = float(data.get("average_time", self.average_time))


class AdaptiveDwellManager:
    """
    Keeps per-gesture dwell times tuned to how the user actually performs.

    Features:
    - Exponentially smoothed adaptation after every resolved attempt
    - Context multipliers (risk, fatigue, confidence)
    - Fatigue classification over a trailing window, refreshed on an interval
    - Best-effort persistence of dwell times, histories and zone thresholds
    """

    def __init__(self, cfg: DwellConfig, store=None, zones: Optional[ZonesConfig] = None):
        self.cfg = cfg
        self.store = store
        self.zones = zones
        self.current: Dict[GestureType, float] = {}
        self.history: Dict[GestureType, GestureHistory] = {}
        self._fatigue = FatigueState.NORMAL
        self._last_fatigue_check: Optional[float] = None
        self._reset_state()

        if store is not None:
            self._load()

    # ------------------------------------------------------------------
    # Dwell times
    # ------------------------------------------------------------------

    def dwell_time(self, gesture_type: GestureType, context: DwellContext = DwellContext.NORMAL) -> float:
        """Current dwell time in ms for a gesture under the given context."""
        base = self.current.get(gesture_type, self.cfg.base_ms.get(gesture_type, 800.0))
        multipliers = self.cfg.multipliers
        factor = {
            DwellContext.HIGH_RISK: multipliers.high_risk,
            DwellContext.LOW_RISK: multipliers.low_risk,
            DwellContext.FATIGUED: multipliers.fatigued,
            DwellContext.CONFIDENT: multipliers.confident,
        }.get(context, 1.0)
        return self._clamp(base * factor)

    def context_for(self, gesture_type: GestureType, t_now: float) -> DwellContext:
        """Risk overrides fatigue; otherwise the fatigue state picks the context."""
        if gesture_type in self.cfg.high_risk:
            return DwellContext.HIGH_RISK
        fatigue = self.fatigue_state(t_now)
        if fatigue is FatigueState.FATIGUED:
            return DwellContext.FATIGUED
        if fatigue is FatigueState.CONFIDENT:
            return DwellContext.CONFIDENT
        return DwellContext.NORMAL

    def dwell_for(self, gesture_type: GestureType, t_now: float) -> float:
        return self.dwell_time(gesture_type, self.context_for(gesture_type, t_now))

    def record_outcome(self, gesture_type: GestureType, success: bool, duration_ms: float,
                       t_now: float) -> None:
        """Append an attempt outcome, re-tune that gesture's dwell time and persist."""
        history = self.history.get(gesture_type)
        if history is None:
            return

        record = HistoryRecord(timestamp=t_now, duration=duration_ms, successful=success)
        if success:
            history.successes.append(record)
        else:
            history.failures.append(record)

        self._update_dwell(gesture_type)
        self.save()

    def _update_dwell(self, gesture_type: GestureType) -> None:
        history = self.history[gesture_type]
        if history.attempts == 0:
            return

        avg_success = None
        if history.successes:
            avg_success = sum(r.duration for r in history.successes) / len(history.successes)
            history.average_time = avg_success

        rate = history.success_rate
        alpha = self.cfg.adaptation_rate
        current = self.current[gesture_type]
        target = current

        if rate > 0.85:
            target = current * (1 - alpha * 0.5)
        elif rate < 0.6:
            target = current * (1 + alpha)
        elif avg_success is not None and avg_success < current * 0.7:
            target = avg_success * 1.2

        updated = self._clamp(current * (1 - alpha) + target * alpha)
        self.current[gesture_type] = updated
        logger.debug("Adapted %s dwell time: %.0fms -> %.0fms (success rate: %.1f%%)",
                     gesture_type.value, current, updated, rate * 100)

    def _clamp(self, value: float) -> float:
        return max(self.cfg.min_ms, min(self.cfg.max_ms, value))

    # ------------------------------------------------------------------
    # Fatigue
    # ------------------------------------------------------------------

    @property
    def fatigue(self) -> FatigueState:
        """Last computed fatigue state, without triggering a recompute."""
        return self._fatigue

    def fatigue_state(self, t_now: float) -> FatigueState:
        """Fatigue classification, recomputed at most once per check interval."""
        interval_s = self.cfg.fatigue_check_ms / 1000.0
        if self._last_fatigue_check is None or t_now - self._last_fatigue_check >= interval_s:
            previous = self._fatigue
            self._fatigue = self._classify_fatigue(t_now)
            self._last_fatigue_check = t_now
            if previous is not self._fatigue:
                logger.info("Fatigue state changed: %s -> %s", previous.value, self._fatigue.value)
        return self._fatigue

    def _classify_fatigue(self, t_now: float) -> FatigueState:
        window_s = self.cfg.fatigue_window_ms / 1000.0
        cutoff = t_now - window_s

        def recent(records) -> int:
            return sum(1 for r in records if r.timestamp is not None and r.timestamp > cutoff)

        successes = sum(recent(h.successes) for h in self.history.values())
        failures = sum(recent(h.failures) for h in self.history.values())
        total = successes + failures
        if total < 10:
            return FatigueState.NORMAL

        error_rate = failures / total
        per_minute = total / (window_s / 60.0)

        if error_rate > 0.4 or per_minute > 30:
            return FatigueState.FATIGUED
        if error_rate < 0.15 and successes >= 15:
            return FatigueState.CONFIDENT
        return FatigueState.NORMAL

    # ------------------------------------------------------------------
    # Statistics / reset
    # ------------------------------------------------------------------

    def statistics(self) -> Dict[str, Dict[str, float]]:
        stats = {}
        for gesture_type, history in self.history.items():
            stats[gesture_type.value] = {
                "success_rate": history.success_rate * 100,
                "attempts": history.attempts,
                "average_time": history.average_time,
                "current_dwell": self.current[gesture_type],
            }
        return stats

    def reset_to_defaults(self) -> None:
        self._reset_state()
        self.save()

    def _reset_state(self) -> None:
        self.current = dict(self.cfg.base_ms)
        self.history = {
            gesture_type: GestureHistory(self.cfg.max_successes, self.cfg.max_failures, base)
            for gesture_type, base in self.cfg.base_ms.items()
        }

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        data = {
            "dwell_times": {k.value: v for k, v in self.current.items()},
            "history": {k.value: h.to_dict() for k, h in self.history.items()},
        }
        if self.zones is not None:
            data["zones"] = asdict(self.zones)
        return data

    def save(self) -> None:
        if self.store is not None:
            self.store.save_gesture_state(self.snapshot())

    def _load(self) -> None:
        data = self.store.load_gesture_state()
        if not data:
            return
        zones = (self.zones.pitch, self.zones.yaw) if self.zones is not None else None
        try:
            for name, value in data.get("dwell_times", {}).items():
                gesture_type = GestureType(name)
                if gesture_type in self.current:
                    self.current[gesture_type] = self._clamp(float(value))
            for name, hist in data.get("history", {}).items():
                gesture_type = GestureType(name)
                if gesture_type in self.history:
                    self.history[gesture_type].restore(hist)
            saved_zones = data.get("zones")
            if saved_zones and self.zones is not None:
                self.zones.pitch = PitchZone(**saved_zones["pitch"])
                self.zones.yaw = YawZone(**saved_zones["yaw"])
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed gesture state: %s", e)
            self._reset_state()
            if zones is not None:
                self.zones.pitch, self.zones.yaw = zones
            return
        logger.info("Loaded gesture configuration: %s",
                    {k.value: round(v) for k, v in self.current.items()})
