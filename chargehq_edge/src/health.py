"""
Health file writer for the edge daemon.

Writes a JSON health file at a configurable path with three fields:
- last_attempt_ts: ISO timestamp of the most recent tick.
- last_success_ts: ISO timestamp of the most recent successful tick.
- consecutive_failures: Ticks skipped since the last success.

The file is rewritten after every tick, providing a simple liveness signal
that Docker HEALTHCHECK or monitoring can inspect.

CHANGELOG:
- 2026-10-19: Initial creation

TODO:
- None
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path


class HealthWriter:
    """Writes edge health status to a JSON file.

    Each recording method updates the in-memory state and immediately
    rewrites the health file so it always reflects the latest status.

    Args:
        path: Filesystem path for the health JSON file. Accepts str or Path.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._last_attempt_ts: str | None = None
        self._last_success_ts: str | None = None
        self._consecutive_failures: int = 0

    def record_success(self) -> None:
        """Record a successful tick and write health file."""
        now = datetime.now(tz=UTC).isoformat()
        self._last_attempt_ts = now
        self._last_success_ts = now
        self._consecutive_failures = 0
        self._write()

    def record_failure(self) -> None:
        """Record a skipped tick and write health file."""
        self._last_attempt_ts = datetime.now(tz=UTC).isoformat()
        self._consecutive_failures += 1
        self._write()

    def _write(self) -> None:
        data = {
            "last_attempt_ts": self._last_attempt_ts,
            "last_success_ts": self._last_success_ts,
            "consecutive_failures": self._consecutive_failures,
        }
        self.path.write_text(json.dumps(data))
