"""
Jotter Backend: Note Service (Business Logic)
==============================================

What:  Note CRUD rules on top of NotesRepository.
How:   Validates drafts and patches, converts "absent" repository results into
       NotFoundError, and leaves persistence details to the repository.
Who:   Called by the notes route handlers with the authenticated user id.

Rules:
    create  → title and deadline required (non-blank); id/createdAt server-side
    update  → note must exist in the caller's namespace; omitted fields keep
              their stored value; blank title or null deadline rejected
    delete  → note must exist; a second delete of the same id is NotFoundError
    list    → malformed stored entries are skipped silently

NoteService is stateless; it holds only the repository it was built with.
"""

import logging
from typing import Any, Dict, List

from jotter.exceptions import NotFoundError, ValidationError
from jotter.repositories.notes_repository import NotesRepository
from jotter.schemas.note import Note, NoteDraft, NotePatch

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class NoteService:
    """Business logic layer for note operations."""

    def __init__(self, repository: NotesRepository):
        self.repository = repository

    async def list_notes(self, user_id: str) -> List[Note]:
        notes = await self.repository.list_by_user(user_id)
        logger.debug("Retrieved %d notes for user %s", len(notes), user_id)
        return notes

    async def create_note(self, user_id: str, draft: NoteDraft) -> Note:
        """
        Validate and persist a new note.

        Raises:
            ValidationError: title or deadline missing
        """
        if _is_blank(draft.title):
            raise ValidationError(message="Title is required", field="title")
        if _is_blank(draft.deadline):
            raise ValidationError(message="Deadline is required", field="deadline")

        note = await self.repository.create(
            user_id,
            {
                "title": draft.title,
                "text": draft.text or "",
                "tags": draft.tags or [],
                "deadline": draft.deadline,
            },
        )
        logger.info("Note %s created for user %s", note.id, user_id)
        return note

    async def update_note(self, user_id: str, note_id: str, patch: NotePatch) -> Note:
        """
        Merge the fields present in `patch` over the stored note.

        Fields the client did not send are left untouched; `text: null` and
        `tags: null` reset to their empty defaults.

        Raises:
            ValidationError: title sent blank or deadline sent null/blank
            NotFoundError: no such note for this user
        """
        changes: Dict[str, Any] = patch.model_dump(exclude_unset=True)

        if "title" in changes and _is_blank(changes["title"]):
            raise ValidationError(message="Title is required", field="title")
        if "deadline" in changes and _is_blank(changes["deadline"]):
            raise ValidationError(message="Deadline is required", field="deadline")
        if "text" in changes and changes["text"] is None:
            changes["text"] = ""
        if "tags" in changes and changes["tags"] is None:
            changes["tags"] = []

        note = await self.repository.update(user_id, note_id, changes)
        if note is None:
            raise NotFoundError(resource="note", resource_id=note_id)

        logger.info("Note %s updated for user %s (%s)", note_id, user_id, ", ".join(sorted(changes)) or "no fields")
        return note

    async def delete_note(self, user_id: str, note_id: str) -> None:
        """
        Raises:
            NotFoundError: no such note for this user
        """
        if not await self.repository.delete(user_id, note_id):
            raise NotFoundError(resource="note", resource_id=note_id)
        logger.info("Note %s deleted for user %s", note_id, user_id)
