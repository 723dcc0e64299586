"""
Cooldowns - per-action "not before" timestamps so gesture classes don't
need to track time themselves.
"""
from dataclasses import asdict
from typing import Dict

from .config import CooldownsConfig


class Cooldowns:
    """
    Per-action cooldown tracker driven by the caller's clock.

    Usage
    -----
    cd = Cooldowns(cfg.cooldowns)
    if cd.try_fire("close_tab", t_now):
        ...  # emit the action
    """

    def __init__(self, cfg: CooldownsConfig) -> None:
        self._durations_s: Dict[str, float] = {k: v / 1000.0 for k, v in asdict(cfg).items()}
        self._not_before: Dict[str, float] = {}

    def ready(self, name: str, t_now: float) -> bool:
        return t_now >= self._not_before.get(name, float("-inf"))

    def trigger(self, name: str, t_now: float) -> None:
        self._not_before[name] = t_now + self._durations_s[name]

    def try_fire(self, name: str, t_now: float) -> bool:
        """
        Return True (and start the cooldown) if the action may fire now.
        """
        if not self.ready(name, t_now):
            return False
        self.trigger(name, t_now)
        return True
