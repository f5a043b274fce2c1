from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional


# PUBLIC_INTERFACE
def utc_now() -> datetime:
    """Return the current instant as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# PUBLIC_INTERFACE
def format_timestamp(moment: datetime) -> str:
    """
    Format an instant as ISO8601 UTC with millisecond precision and a 'Z'
    suffix, e.g. '2025-01-31T13:45:00.123Z'.

    Naive datetimes are taken to be UTC already.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# PUBLIC_INTERFACE
def parse_timestamp(value: object) -> Optional[datetime]:
    """
    Parse a stored ISO8601 timestamp into an aware UTC datetime.

    Returns None for anything that is not a parseable string.
    """
    if not isinstance(value, str):
        return None
    s = value.strip()
    if s.endswith("Z") or s.endswith("z"):
        s = s[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(s)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


# PUBLIC_INTERFACE
def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch for the given instant."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


# PUBLIC_INTERFACE
def allocate_task_id(moment: datetime, existing_ids: Iterable[int]) -> int:
    """
    Derive a task id from the creation instant (epoch milliseconds).

    If another task already holds that id or a later one (same-millisecond
    creation, clock moved backwards), the id becomes max(existing) + 1 so ids
    stay unique and increasing within a collection.
    """
    candidate = epoch_millis(moment)
    highest = max(existing_ids, default=None)
    if highest is not None and candidate <= highest:
        return highest + 1
    return candidate
