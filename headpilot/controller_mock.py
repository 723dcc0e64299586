"""
Mock controller implementation for testing action intents.
"""
import logging
from collections import Counter
from typing import Any, List, Tuple

from .types import EditOption

logger = logging.getLogger(__name__)


class MockController:
    """Mock controller that logs and records actions instead of executing them."""

    def __init__(self, field_count: int = 3):
        """Initialize the mock controller."""
        self.field_count = field_count
        self.calls: List[Tuple[str, Tuple[Any, ...]]] = []
        self.counts: Counter = Counter()

    def _record(self, name: str, *args: Any, level: int = logging.INFO) -> None:
        self.calls.append((name, args))
        self.counts[name] += 1
        logger.log(level, "[MockController] %s%s (call #%d)", name, args if args else "", self.counts[name])

    async def scroll(self, delta_x: float, delta_y: float) -> None:
        self._record("scroll", delta_x, delta_y, level=logging.DEBUG)

    async def move_cursor(self, x: float, y: float) -> None:
        self._record("move_cursor", x, y, level=logging.DEBUG)

    async def click(self) -> None:
        self._record("click")

    async def go_back(self) -> None:
        self._record("go_back")

    async def go_forward(self) -> None:
        self._record("go_forward")

    async def new_tab(self) -> None:
        self._record("new_tab")

    async def close_tab(self) -> None:
        self._record("close_tab")

    async def refresh(self) -> None:
        self._record("refresh")

    async def next_tab(self) -> None:
        self._record("next_tab")

    async def previous_tab(self) -> None:
        self._record("previous_tab")

    async def enable_text_field_mode(self) -> int:
        self._record("enable_text_field_mode")
        return self.field_count

    async def disable_text_field_mode(self) -> None:
        self._record("disable_text_field_mode")

    async def next_text_field(self, index: int) -> None:
        self._record("next_text_field", index)

    async def previous_text_field(self, index: int) -> None:
        self._record("previous_text_field", index)

    async def select_text_field(self, index: int) -> None:
        self._record("select_text_field", index)

    async def confirm_edit_option(self, option: EditOption) -> None:
        self._record("confirm_edit_option", option)

    def reset_counters(self) -> None:
        """Reset recorded calls for testing."""
        self.calls.clear()
        self.counts.clear()
