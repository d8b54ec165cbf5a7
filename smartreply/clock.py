"""Millisecond wall-clock helpers.

Timestamps throughout the pipeline are integer milliseconds since the epoch.
Components take an optional ``clock`` callable so tests can pin time.
"""

import time
from collections.abc import Callable
from datetime import UTC, datetime

Clock = Callable[[], int]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


def ms_to_iso(timestamp_ms: int) -> str:
    """Render epoch milliseconds as ISO 8601 UTC with a ``Z`` suffix."""
    dt = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")
