"""Shared utility functions."""


def escape_like(value: str) -> str:
    """Escape SQL ILIKE/LIKE wildcard characters.

    Prevents user-controlled input from being interpreted as wildcard patterns
    when used in ILIKE queries.
    """
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def contains_pattern(value: str) -> str:
    """Build an escaped ``%value%`` pattern for substring ILIKE matching."""
    return f"%{escape_like(value)}%"


def truncate(text: str | None, max_chars: int) -> str | None:
    if text is None:
        return None
    return text[:max_chars]
