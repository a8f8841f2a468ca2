"""
Jotter Client: Note List View
==============================

What:  Derives what the main screen shows from the fetched note list.
How:   Pure functions over jotter.schemas.note.Note; `now` is injectable so
       labels and the upcoming pick are deterministic under test.

Screen Layout:
    ┌──────────────────────────────┐
    │ Upcoming: nearest deadline   │  ← upcoming_note()
    ├──────────────────────────────┤
    │ [search box]  [sort: time ▾] │
    │ note, note, note ...         │  ← visible_notes(): searched, sorted,
    └──────────────────────────────┘    upcoming note excluded
"""

import math
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from jotter.clock import utc_now
from jotter.schemas.note import Note, parse_iso_datetime

SORT_KEYS = ("name", "time", "tags")

SECONDS_PER_DAY = 24 * 60 * 60


def deadline_at(deadline: str) -> datetime:
    """Parse a stored deadline; values without an offset are taken as UTC."""
    moment = parse_iso_datetime(deadline)
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment


def valid_notes(notes: Iterable[Note]) -> List[Note]:
    """Notes that can be displayed: id, title and deadline all present."""
    return [note for note in notes if note.id and note.title and note.deadline]


def upcoming_note(notes: Iterable[Note], now: Optional[datetime] = None) -> Optional[Note]:
    """The note with the nearest deadline that has not passed yet, if any."""
    now = now or utc_now()
    future = [note for note in valid_notes(notes) if deadline_at(note.deadline) >= now]
    if not future:
        return None
    return min(future, key=lambda note: deadline_at(note.deadline))


def matches(note: Note, query: str) -> bool:
    needle = query.lower()
    return (
        needle in note.title.lower()
        or needle in (note.text or "").lower()
        or any(needle in tag.lower() for tag in note.tags)
    )


def search(notes: Iterable[Note], query: str) -> List[Note]:
    """Case-insensitive substring search over title, text and tags."""
    return [note for note in notes if matches(note, query)]


def sort_notes(notes: Iterable[Note], sort_by: str = "time") -> List[Note]:
    """
    Sort for display. Keys:
        name:  title, case-insensitive
        time:  deadline, soonest first
        tags:  all tags joined, lower-cased
    """
    if sort_by == "name":
        return sorted(notes, key=lambda note: note.title.casefold())
    if sort_by == "time":
        return sorted(notes, key=lambda note: deadline_at(note.deadline))
    if sort_by == "tags":
        return sorted(notes, key=lambda note: "".join(note.tags).lower())
    raise ValueError(f"Unknown sort key '{sort_by}'. Expected one of {', '.join(SORT_KEYS)}")


def visible_notes(
    notes: Iterable[Note],
    query: str = "",
    sort_by: str = "time",
    now: Optional[datetime] = None,
) -> List[Note]:
    """The main list: valid notes matching `query`, sorted, minus the upcoming one."""
    shown = valid_notes(notes)
    upcoming = upcoming_note(shown, now)
    filtered = search(shown, query)
    if upcoming is not None:
        filtered = [note for note in filtered if note.id != upcoming.id]
    return sort_notes(filtered, sort_by)


def days_until(deadline: str, now: Optional[datetime] = None) -> int:
    """Whole days from `now` to the deadline, rounded up."""
    now = now or utc_now()
    return math.ceil((deadline_at(deadline) - now).total_seconds() / SECONDS_PER_DAY)


def describe_deadline(deadline: str, now: Optional[datetime] = None) -> str:
    days = days_until(deadline, now)
    if days == 0:
        return "Today"
    if days == 1:
        return "Tomorrow"
    if days > 0:
        return f"In {days} days"
    return f"{abs(days)} days ago"


def is_overdue(deadline: str, now: Optional[datetime] = None) -> bool:
    return deadline_at(deadline) < (now or utc_now())
