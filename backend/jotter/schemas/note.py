"""
Jotter Backend: Note Schemas
=============================

What:  Pydantic models defining the notes API contract and the stored note document.
How:   FastAPI uses these models to validate request bodies, serialize responses
       and generate OpenAPI docs. The same `Note` model is the JSON document kept
       in the key-value store, so wire and storage formats never drift.

Naming:
    JSON uses camelCase (userId, createdAt); Python attributes are snake_case.
    Responses are serialized by alias.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = {
    "alias_generator": to_camel,
    "populate_by_name": True,
}


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 date or date-time, accepting a trailing 'Z' for UTC."""
    candidate = value.strip()
    if candidate.endswith(("Z", "z")):
        candidate = candidate[:-1] + "+00:00"
    return datetime.fromisoformat(candidate)


def unique_tags(tags: List[str]) -> List[str]:
    """Drop duplicate tags, keeping the first occurrence and insertion order."""
    return list(dict.fromkeys(tags))


class _NoteFields(BaseModel):
    """Shared field validation for note bodies."""

    model_config = CAMEL_CONFIG

    @field_validator("deadline", check_fields=False)
    @classmethod
    def validate_deadline(cls, v: Optional[str]) -> Optional[str]:
        """
        Deadlines must parse as ISO-8601 but are stored verbatim, so a note
        reads back exactly as it was written.
        """
        if v is None or v == "":
            return v
        try:
            parse_iso_datetime(v)
        except ValueError:
            raise ValueError(f"Deadline '{v}' is not an ISO-8601 date-time")
        return v

    @field_validator("tags", check_fields=False)
    @classmethod
    def validate_tags(cls, v: Optional[List[str]]) -> Optional[List[str]]:
        if v is None:
            return v
        return unique_tags(v)


# ══════════════════════════════════════════════════════════════════════════
# Stored document / response model
# ══════════════════════════════════════════════════════════════════════════


class Note(_NoteFields):
    """
    What:  A note as stored under `user:<userId>:note:<id>` and returned by the API.
    Who:   Produced by NotesRepository; returned by every notes endpoint.

    id, user_id and created_at are server-assigned and never replaced by updates.
    """
    id: str = Field(description="Server-generated opaque identifier (UUID4)")
    user_id: str = Field(description="Owner; always the authenticated user")
    title: str = Field(description="Note title")
    text: str = Field(default="", description="Free-form body")
    tags: List[str] = Field(default_factory=list, description="Ordered, de-duplicated tags")
    deadline: Optional[str] = Field(
        default=None,
        description="ISO-8601 date-time, stored verbatim",
    )
    created_at: Optional[str] = Field(
        default=None,
        description="UTC creation time, ISO-8601 with milliseconds; null only on legacy entries",
    )


# ══════════════════════════════════════════════════════════════════════════
# Request models
# ══════════════════════════════════════════════════════════════════════════


class NoteDraft(_NoteFields):
    """
    What:  Body of POST /notes.
    How:   Types are checked here; required-field rules (title, deadline) are
           enforced by NoteService so the client gets one clear message.
    """
    title: Optional[str] = Field(default=None, description="Required, non-blank")
    text: Optional[str] = Field(default=None, description="Defaults to empty string")
    tags: Optional[List[str]] = Field(default=None, description="Defaults to []")
    deadline: Optional[str] = Field(default=None, description="Required, ISO-8601")


class NotePatch(_NoteFields):
    """
    What:  Body of PUT /notes/{id}.

    Any subset of fields may be sent. Omitted fields keep their stored value;
    explicitly blank titles and null deadlines are rejected by NoteService.
    """
    title: Optional[str] = None
    text: Optional[str] = None
    tags: Optional[List[str]] = None
    deadline: Optional[str] = None


# ══════════════════════════════════════════════════════════════════════════
# Response envelopes
# ══════════════════════════════════════════════════════════════════════════


class NoteEnvelope(BaseModel):
    """Returned by POST /notes and PUT /notes/{id}."""
    note: Note


class NoteListResponse(BaseModel):
    """Returned by GET /notes. Ordered by creation time, oldest first."""
    notes: List[Note] = Field(default_factory=list)
