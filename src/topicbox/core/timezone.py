"""UTC timezone enforcement and millisecond timestamps.

Setting TZ=UTC keeps datetime behavior identical across environments, which
matters for the human-readable dates written by the CSV export.
"""

import os
import time

os.environ["TZ"] = "UTC"


def current_millis() -> int:
    """Return the current time as integer milliseconds since the epoch."""
    return time.time_ns() // 1_000_000
