"""Wall-clock helpers. All persisted timestamps are epoch milliseconds."""

import time


def now_ms() -> int:
    """Current time as integer epoch milliseconds."""
    return time.time_ns() // 1_000_000
