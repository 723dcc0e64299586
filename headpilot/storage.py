"""
Load and save calibration and adaptive gesture state from/to disk.
"""
import json
import logging
import os
import time
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .types import NeutralBaseline

logger = logging.getLogger(__name__)

BASELINE_FILE = "baseline.json"
GESTURE_STATE_FILE = "gesture_config.json"


class JsonStateStore:
    """
    Best-effort JSON persistence.

    Writes are serialized on the calling thread and handed to a single
    background worker so a frame tick never waits on disk. Every failure
    is logged and swallowed; in-memory state stays authoritative.
    """

    def __init__(self, directory: Union[str, Path], stale_after_days: float = 7,
                 background: bool = True):
        self.directory = Path(directory).expanduser()
        self.stale_after_s = stale_after_days * 24 * 60 * 60
        self._executor: Optional[ThreadPoolExecutor] = (
            ThreadPoolExecutor(max_workers=1, thread_name_prefix="headpilot-store")
            if background else None
        )
        self._pending: List[Future] = []

    # ===== Neutral baseline =====

    def load_baseline(self) -> Optional[NeutralBaseline]:
        data = self._read(BASELINE_FILE)
        if data is None:
            return None
        try:
            return NeutralBaseline(
                pitch=float(data["pitch"]),
                yaw=float(data["yaw"]),
                roll=float(data["roll"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed baseline: %s", exc)
            return None

    def save_baseline(self, baseline: NeutralBaseline) -> None:
        self._write(BASELINE_FILE, {
            "pitch": baseline.pitch,
            "yaw": baseline.yaw,
            "roll": baseline.roll,
        })

    def clear_baseline(self) -> None:
        self._submit(self._remove, self.directory / BASELINE_FILE)

    # ===== Gesture state bundle =====

    def load_gesture_state(self) -> Optional[Dict[str, Any]]:
        """
        Returns:
            {dwell_times, history, zones, last_updated} or None if absent,
            unreadable or older than the staleness limit
        """
        data = self._read(GESTURE_STATE_FILE)
        if data is None:
            return None
        if not isinstance(data, dict):
            logger.warning("Ignoring malformed gesture state in %s", GESTURE_STATE_FILE)
            return None

        try:
            last_updated = float(data.get("last_updated", 0))
        except (TypeError, ValueError):
            last_updated = 0.0
        age_s = time.time() - last_updated
        if age_s > self.stale_after_s:
            logger.warning("Gesture state is %.1f days old; using defaults", age_s / 86400)
            return None
        return data

    def save_gesture_state(self, bundle: Dict[str, Any]) -> None:
        data = dict(bundle)
        data["last_updated"] = time.time()
        self._write(GESTURE_STATE_FILE, data)

    # ===== Worker management =====

    def flush(self) -> None:
        """Block until every queued write has finished."""
        pending, self._pending = self._pending, []
        for future in pending:
            future.result()

    def close(self) -> None:
        self.flush()
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ===== Internals =====

    def _read(self, name: str) -> Optional[Any]:
        path = self.directory / name
        if not path.exists():
            return None
        try:
            with open(path, encoding="utf-8") as fh:
                return json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Failed to load %s: %s", path, exc)
            return None

    def _write(self, name: str, data: Dict[str, Any]) -> None:
        try:
            payload = json.dumps(data, indent=2)
        except (TypeError, ValueError) as exc:
            logger.warning("Failed to serialize %s: %s", name, exc)
            return
        self._submit(self._write_file, self.directory / name, payload)

    def _submit(self, fn, *args) -> None:
        if self._executor is None:
            fn(*args)
            return
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(fn, *args))

    @staticmethod
    def _write_file(path: Path, payload: str) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(path.suffix + ".tmp")
            with open(tmp, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp, path)
            logger.debug("Saved %s", path)
        except OSError as exc:
            logger.warning("Failed to save %s: %s", path, exc)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning("Failed to remove %s: %s", path, exc)
