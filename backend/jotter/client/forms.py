"""
Jotter Client: Form Validation
===============================

What:  Input rules for the login, register, change-password and note editor forms.
How:   Each validator returns the cleaned values or raises FormError carrying
       the message shown under the form. Nothing here performs I/O, so a
       rejected form never reaches the network.
"""

import re
from datetime import date
from typing import List, Optional, Sequence, Tuple

from jotter.schemas.note import NoteDraft, parse_iso_datetime

MIN_PASSWORD_LENGTH = 6

_DATE_ONLY = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class FormError(ValueError):
    """A form input rule was violated; `message` is user-facing."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


def _blank(value: Optional[str]) -> bool:
    return not value or not value.strip()


def validate_login(email: str, password: str) -> Tuple[str, str]:
    if _blank(email) or _blank(password):
        raise FormError("Please fill in all fields")
    return email.strip(), password


def validate_registration(
    email: str,
    password: str,
    confirm_password: str,
    username: str,
    min_length: int = MIN_PASSWORD_LENGTH,
) -> Tuple[str, str, str]:
    """Returns (email, password, username) with email and username trimmed."""
    if _blank(email) or _blank(password) or _blank(username):
        raise FormError("Please fill in all fields")
    if password != confirm_password:
        raise FormError("Passwords do not match")
    if len(password) < min_length:
        raise FormError(f"Password must be at least {min_length} characters")
    return email.strip(), password, username.strip()


def validate_password_change(
    new_password: str,
    confirm_password: str,
    min_length: int = MIN_PASSWORD_LENGTH,
) -> str:
    if _blank(new_password) or _blank(confirm_password):
        raise FormError("Please fill in both password fields")
    if new_password != confirm_password:
        raise FormError("Passwords do not match")
    if len(new_password) < min_length:
        raise FormError(f"Password must be at least {min_length} characters")
    return new_password


def end_of_day(deadline: str) -> str:
    """
    Normalize a deadline picked in the editor.

    A date-only value (YYYY-MM-DD) becomes the last millisecond of that day
    in UTC; a full ISO-8601 date-time is returned unchanged.
    """
    value = deadline.strip()
    try:
        if _DATE_ONLY.match(value):
            return f"{date.fromisoformat(value).isoformat()}T23:59:59.999Z"
        parse_iso_datetime(value)
    except ValueError:
        raise FormError("Deadline must be a valid date")
    return value


def editor_date(deadline: Optional[str]) -> str:
    """Date part of a stored deadline, as pre-filled into the editor's date field."""
    if not deadline:
        return ""
    return deadline.split("T")[0]


def add_tag(tags: Sequence[str], entry: str) -> List[str]:
    """Append `entry` trimmed and lower-cased, unless blank or already present."""
    tag = entry.strip().lower()
    if not tag or tag in tags:
        return list(tags)
    return [*tags, tag]


def remove_tag(tags: Sequence[str], tag: str) -> List[str]:
    return [t for t in tags if t != tag]


def validate_note_draft(
    title: str,
    deadline: str,
    text: str = "",
    tags: Optional[Sequence[str]] = None,
) -> NoteDraft:
    """
    Build the body sent on save, for both create and update.

    Title and text are trimmed; a date-only deadline is moved to end of day.
    """
    if _blank(title):
        raise FormError("Title is required")
    if _blank(deadline):
        raise FormError("Deadline is required")

    return NoteDraft(
        title=title.strip(),
        text=(text or "").strip(),
        tags=list(tags or []),
        deadline=end_of_day(deadline),
    )
