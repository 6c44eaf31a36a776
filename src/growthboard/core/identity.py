"""Identifier and timestamp utilities.

- new_id: short collision-resistant identifier for boards, experiments,
  comments, metrics and dimensions
- utc_now_iso: ISO-8601 clock used for created_at and comment timestamps
- parse_timestamp: inverse of utc_now_iso, tolerant of a trailing "Z"
"""

import secrets
import string
from datetime import datetime, timezone

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 12


def new_id(length: int = ID_LENGTH) -> str:
    """Generate a random base-36 identifier.

    Args:
        length: Number of characters (default 12, ~62 bits of entropy).

    Returns:
        Lowercase alphanumeric string.
    """
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    Naive timestamps are assumed to be UTC.

    Args:
        value: ISO-8601 string, e.g. "2024-03-01T12:00:00Z".

    Returns:
        Timezone-aware datetime.

    Raises:
        ValueError: If value is not a valid ISO-8601 timestamp.
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
