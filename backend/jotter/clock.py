"""UTC timestamps in the format stored on notes and profiles."""

from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_millis(moment: Optional[datetime] = None) -> str:
    """
    Format `moment` (default: now) as UTC ISO-8601 with milliseconds and a Z
    suffix, e.g. 2025-01-01T10:00:00.000Z.
    """
    moment = (moment or utc_now()).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")
