"""Key layout of the flat key-value namespace."""


def profile_key(user_id: str) -> str:
    return f"user:{user_id}:profile"


def notes_prefix(user_id: str) -> str:
    return f"user:{user_id}:note:"


def note_key(user_id: str, note_id: str) -> str:
    return f"{notes_prefix(user_id)}{note_id}"
