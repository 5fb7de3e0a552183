from __future__ import annotations

# letters of any script plus these separators
NAME_EXTRA_CHARS = frozenset(" .'-")


def is_blank(value: str | None) -> bool:
    return value is None or not value.strip()


def is_valid_name(name: str) -> bool:
    """Whole-string match: one or more Unicode letters, spaces, periods, apostrophes or hyphens."""
    if not name:
        return False
    return all(ch.isalpha() or ch in NAME_EXTRA_CHARS for ch in name)
