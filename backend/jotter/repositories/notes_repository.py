"""
Jotter Backend: Notes Repository
=================================

What:  Note persistence under `user:<userId>:note:<noteId>`.
How:   Notes are stored as the camelCase JSON form of the `Note` schema.
       Reads are lenient: anything with an id and a title is a note, and
       fields written by older clients or by hand are normalized on the way
       out. Only entries without an id or title are skipped.
Who:   Used by NoteService.

Ownership:
    Every key is built from the `user_id` argument, which callers take from
    the authenticated identity. A note id belonging to another user simply
    resolves to an absent key.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from jotter.clock import iso_millis
from jotter.repositories.keys import note_key, notes_prefix
from jotter.schemas.note import Note, parse_iso_datetime, unique_tags
from jotter.storage.kv_store import KeyValueStore

logger = logging.getLogger(__name__)

# Fields a patch may replace; identity and creation time are immutable
MUTABLE_FIELDS = ("title", "text", "tags", "deadline")


def _optional_iso(value: Any) -> Optional[str]:
    """The value when it is an ISO-8601 string, else None."""
    if not isinstance(value, str):
        return None
    try:
        parse_iso_datetime(value)
    except ValueError:
        return None
    return value


def normalize_note(raw: Any, user_id: str) -> Optional[Note]:
    """
    Convert a stored value to a Note, or None when it is malformed.

    Malformed means not an object, or without a non-empty id or title.
    Everything else is repaired:
        text      non-string → ""
        tags      non-list → [], non-string items dropped
        deadline  not ISO-8601 → None
        createdAt not ISO-8601 → None (listed last)
        userId    taken from the namespace the entry was read from
    """
    if not isinstance(raw, dict) or not raw.get("id") or not raw.get("title"):
        return None

    tags = raw.get("tags")
    return Note(
        id=str(raw["id"]),
        user_id=user_id,
        title=str(raw["title"]),
        text=raw["text"] if isinstance(raw.get("text"), str) else "",
        tags=unique_tags([t for t in tags if isinstance(t, str)]) if isinstance(tags, list) else [],
        deadline=_optional_iso(raw.get("deadline")),
        created_at=_optional_iso(raw.get("createdAt")),
    )


def creation_order(note: Note):
    """Sort key: oldest first, entries without createdAt last."""
    return (note.created_at is None, note.created_at or "")


class NotesRepository:
    """Repository-style access to one user's notes."""

    def __init__(self, store: KeyValueStore):
        self.store = store

    async def list_by_user(self, user_id: str) -> List[Note]:
        raw_notes = await self.store.get_by_prefix(notes_prefix(user_id))
        notes = [note for note in (normalize_note(raw, user_id) for raw in raw_notes) if note is not None]
        dropped = len(raw_notes) - len(notes)
        if dropped:
            logger.info("Dropped %d malformed note(s) for user %s", dropped, user_id)
        return sorted(notes, key=creation_order)

    async def get(self, user_id: str, note_id: str) -> Optional[Note]:
        return normalize_note(await self.store.get(note_key(user_id, note_id)), user_id)

    async def create(self, user_id: str, draft: Dict[str, Any]) -> Note:
        """
        Persist a new note built from `draft` (title, text, tags, deadline).

        The id and createdAt are always generated here.
        """
        note = Note(
            id=str(uuid.uuid4()),
            user_id=user_id,
            title=draft["title"],
            text=draft.get("text") or "",
            tags=draft.get("tags") or [],
            deadline=draft.get("deadline"),
            created_at=iso_millis(),
        )
        await self._save(note)
        return note

    async def update(self, user_id: str, note_id: str, patch: Dict[str, Any]) -> Optional[Note]:
        """
        Merge `patch` over the stored note and persist it.

        Returns None when no note exists at that id in the user's namespace.
        Keys outside MUTABLE_FIELDS are ignored.
        """
        existing = await self.get(user_id, note_id)
        if existing is None:
            return None

        changes = {name: value for name, value in patch.items() if name in MUTABLE_FIELDS}
        updated = Note.model_validate(
            {**existing.model_dump(), **changes}
        )
        await self._save(updated)
        return updated

    async def delete(self, user_id: str, note_id: str) -> bool:
        """Remove the note; returns False when there is no note to remove."""
        if await self.get(user_id, note_id) is None:
            return False
        await self.store.delete(note_key(user_id, note_id))
        return True

    async def _save(self, note: Note) -> None:
        await self.store.set(note_key(note.user_id, note.id), note.model_dump(by_alias=True))
