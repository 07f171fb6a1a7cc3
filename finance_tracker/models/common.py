"""
Shared field rules for records that are written to delimited text files.

The CSV format used by the record store has no quoting or escaping,
so a delimiter inside a value would split the record. Values carrying
one are rejected when the model is built.
"""

from typing import Iterable, Optional

FIELD_DELIMITER = ","
TAG_DELIMITER = ";"
_LINE_BREAKS = ("\n", "\r")


def check_flat_text(value: Optional[str], *, extra: str = "") -> Optional[str]:
    """Reject text that cannot be stored as a single delimited field."""
    if value is None:
        return value
    forbidden = (FIELD_DELIMITER,) + _LINE_BREAKS + tuple(extra)
    for char in forbidden:
        if char in value:
            raise ValueError(
                f"Value {value!r} contains a reserved character {char!r}"
            )
    return value


def normalize_tags(tags: Iterable[str]) -> list[str]:
    """Strip, drop blanks and de-duplicate tags, keeping first occurrence."""
    seen: list[str] = []
    for tag in tags:
        tag = tag.strip()
        if not tag or tag in seen:
            continue
        check_flat_text(tag, extra=TAG_DELIMITER)
        seen.append(tag)
    return seen
