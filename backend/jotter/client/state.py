"""
Jotter Client: Application State Machine
=========================================

What:  The screen the UI shows and the context it needs, driven by typed events.
How:   dispatch(event) validates the transition against the current state and
       updates the context; invalid combinations raise InvalidTransition.

Transitions:
    ┌───────────┐  LoggedIn   ┌──────┐  StartCreate / StartEdit  ┌─────────┐
    │ LoggedOut │────────────▶│ Main │──────────────────────────▶│ Editing │
    └───────────┘             │      │◀──────────────────────────│         │
          ▲                   │      │  EditFinished             └─────────┘
          │                   │      │  OpenSettings             ┌──────────┐
          │                   │      │──────────────────────────▶│ Settings │
          │                   │      │◀──────────────────────────│          │
          │                   └──────┘  CloseSettings            └──────────┘
          └─────── LoggedOut (from any state) ───────

    TokenRefreshed keeps the current state (any signed-in state) and only
    replaces the access token. EditFinished bumps `notes_version`, which
    tells the main screen to refetch.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from jotter.schemas.note import Note

logger = logging.getLogger(__name__)


class AppState(str, Enum):
    LOGGED_OUT = "LoggedOut"
    MAIN = "Main"
    EDITING = "Editing"
    SETTINGS = "Settings"


@dataclass(frozen=True)
class CurrentUser:
    user_id: str
    username: str
    email: str
    access_token: str


# ── Events ────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class LoggedIn:
    user: CurrentUser


@dataclass(frozen=True)
class LoggedOut:
    pass


@dataclass(frozen=True)
class StartCreate:
    pass


@dataclass(frozen=True)
class StartEdit:
    note: Note


@dataclass(frozen=True)
class EditFinished:
    outcome: str = "saved"  # saved | deleted | cancelled


@dataclass(frozen=True)
class OpenSettings:
    pass


@dataclass(frozen=True)
class CloseSettings:
    pass


@dataclass(frozen=True)
class TokenRefreshed:
    access_token: str


class InvalidTransition(Exception):
    def __init__(self, state: AppState, event: object):
        self.state = state
        self.event = event
        super().__init__(f"{type(event).__name__} is not valid in state {state.value}")


class AppStateMachine:
    """
    Attributes:
        state:          Current screen
        user:           Signed-in user, None while LoggedOut
        editing_note:   Note open in the editor; None when creating or not editing
        notes_version:  Incremented whenever an edit finishes
    """

    def __init__(self):
        self.state = AppState.LOGGED_OUT
        self.user: Optional[CurrentUser] = None
        self.editing_note: Optional[Note] = None
        self.notes_version = 0

    @property
    def access_token(self) -> Optional[str]:
        return self.user.access_token if self.user else None

    def _require(self, event: object, *states: AppState) -> None:
        if self.state not in states:
            raise InvalidTransition(self.state, event)

    def dispatch(self, event: object) -> AppState:
        """Apply `event` and return the new state."""
        previous = self.state

        if isinstance(event, LoggedOut):
            self.user = None
            self.editing_note = None
            self.state = AppState.LOGGED_OUT

        elif isinstance(event, LoggedIn):
            self._require(event, AppState.LOGGED_OUT)
            self.user = event.user
            self.state = AppState.MAIN

        elif isinstance(event, StartCreate):
            self._require(event, AppState.MAIN)
            self.editing_note = None
            self.state = AppState.EDITING

        elif isinstance(event, StartEdit):
            self._require(event, AppState.MAIN)
            self.editing_note = event.note
            self.state = AppState.EDITING

        elif isinstance(event, EditFinished):
            self._require(event, AppState.EDITING)
            self.editing_note = None
            self.notes_version += 1
            self.state = AppState.MAIN

        elif isinstance(event, OpenSettings):
            self._require(event, AppState.MAIN)
            self.state = AppState.SETTINGS

        elif isinstance(event, CloseSettings):
            self._require(event, AppState.SETTINGS)
            self.state = AppState.MAIN

        elif isinstance(event, TokenRefreshed):
            self._require(event, AppState.MAIN, AppState.EDITING, AppState.SETTINGS)
            self.user = replace(self.user, access_token=event.access_token)

        else:
            raise InvalidTransition(self.state, event)

        logger.debug("%s: %s → %s", type(event).__name__, previous.value, self.state.value)
        return self.state
