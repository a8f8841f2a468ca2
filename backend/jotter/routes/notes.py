"""
Jotter Backend: Notes Route Handlers
=====================================

What:  GET/POST /notes, PUT/DELETE /notes/{id}.
How:   Authenticates via get_current_user, delegates to NoteService, wraps the
       result in the response envelope.
Who:   Called by the client's note list and note editor.

Every handler depends on get_current_user before anything else, so requests
without a valid token fail with 401 before the body is read or storage is hit.
"""

import logging

from fastapi import APIRouter, Depends

from jotter.dependencies import get_current_user, get_note_service
from jotter.schemas.common import ErrorResponse, MessageResponse
from jotter.schemas.note import NoteDraft, NoteEnvelope, NoteListResponse, NotePatch
from jotter.services.auth_base import AuthUser
from jotter.services.note_service import NoteService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

UNAUTHORIZED = {401: {"description": "Missing or invalid bearer token", "model": ErrorResponse}}
SERVER_ERROR = {500: {"description": "Server error", "model": ErrorResponse}}


@router.get(
    "/notes",
    response_model=NoteListResponse,
    responses={**UNAUTHORIZED, **SERVER_ERROR},
    summary="List the caller's notes",
)
async def list_notes(
    user: AuthUser = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
) -> NoteListResponse:
    """Malformed stored entries are skipped rather than failing the listing."""
    notes = await service.list_notes(user.id)
    return NoteListResponse(notes=notes)


@router.post(
    "/notes",
    response_model=NoteEnvelope,
    responses={
        400: {"description": "Title or deadline missing", "model": ErrorResponse},
        **UNAUTHORIZED,
        **SERVER_ERROR,
    },
    summary="Create a note",
)
async def create_note(
    body: NoteDraft,
    user: AuthUser = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    note = await service.create_note(user.id, body)
    return NoteEnvelope(note=note)


@router.put(
    "/notes/{note_id}",
    response_model=NoteEnvelope,
    responses={
        400: {"description": "Blank title or null deadline", "model": ErrorResponse},
        **UNAUTHORIZED,
        404: {"description": "Note not found", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Update a note",
    description="Merges the supplied fields over the stored note; omitted fields are kept.",
)
async def update_note(
    note_id: str,
    body: NotePatch,
    user: AuthUser = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
) -> NoteEnvelope:
    note = await service.update_note(user.id, note_id, body)
    return NoteEnvelope(note=note)


@router.delete(
    "/notes/{note_id}",
    response_model=MessageResponse,
    responses={
        **UNAUTHORIZED,
        404: {"description": "Note not found", "model": ErrorResponse},
        **SERVER_ERROR,
    },
    summary="Delete a note",
)
async def delete_note(
    note_id: str,
    user: AuthUser = Depends(get_current_user),
    service: NoteService = Depends(get_note_service),
) -> MessageResponse:
    await service.delete_note(user.id, note_id)
    return MessageResponse(message="Note deleted successfully")
