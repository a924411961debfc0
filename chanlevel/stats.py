"""Processing counters for the channel service.

Thread-safe: the codec runs on worker threads while forwarding runs on the
event loop, and both update the same counters.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass

from .pipeline import Completed, Dropped, Failed, Outcome


@dataclass
class StatsSnapshot:
    received: int = 0
    dropped: int = 0
    completed: int = 0
    mismatched: int = 0
    failed: int = 0
    forwarded: int = 0
    forward_errors: int = 0
    corrected_frames: int = 0

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            "received": self.received,
            "dropped": self.dropped,
            "completed": self.completed,
            "mismatched": self.mismatched,
            "failed": self.failed,
            "forwarded": self.forwarded,
            "forwardErrors": self.forward_errors,
            "correctedFrames": self.corrected_frames,
        }


class ChannelStats:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._stats = StatsSnapshot()

    def record_received(self) -> None:
        with self._lock:
            self._stats.received += 1

    def record_outcome(self, outcome: Outcome) -> None:
        with self._lock:
            if isinstance(outcome, Dropped):
                self._stats.dropped += 1
            elif isinstance(outcome, Failed):
                self._stats.failed += 1
            elif isinstance(outcome, Completed):
                self._stats.completed += 1
                self._stats.corrected_frames += outcome.corrected_frames
                if outcome.mismatch_detected:
                    self._stats.mismatched += 1

    def record_forward(self, ok: bool) -> None:
        with self._lock:
            if ok:
                self._stats.forwarded += 1
            else:
                self._stats.forward_errors += 1

    def snapshot(self) -> StatsSnapshot:
        with self._lock:
            return StatsSnapshot(**asdict(self._stats))
