"""Time helpers."""

from __future__ import annotations

import re
from datetime import datetime, timezone

# log shippers emit anywhere from millisecond to nanosecond precision
_FRACTION_RE = re.compile(r"\.(\d+)")


def parse_timestamp(value: str) -> float | None:
    """Parse an ISO-8601 ``@timestamp`` into unix seconds, or None."""
    if not value:
        return None
    text = _FRACTION_RE.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value.strip(), count=1)
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()
