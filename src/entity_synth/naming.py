"""
Identifier normalization shared by the inference engine and the builder.

Both transforms split a catalog identifier on ``_``, ``-``, whitespace and
lower-to-upper case boundaries, so ``student_course``, ``student-course``
and ``studentCourse`` normalize identically.
"""

from __future__ import annotations

import re
from typing import List

_SEPARATORS = re.compile(r"[_\-\s]+")
_CASE_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def split_words(identifier: str) -> List[str]:
    """Split an identifier into its word segments."""
    spaced = _CASE_BOUNDARY.sub(r"\1 \2", identifier)
    return [w for w in _SEPARATORS.split(spaced) if w]


def _title(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def to_entity_name(identifier: str) -> str:
    """``student_course`` -> ``StudentCourse``."""
    return "".join(_title(w) for w in split_words(identifier))


def to_field_name(identifier: str) -> str:
    """``author_id`` -> ``authorId``."""
    words = split_words(identifier)
    if not words:
        return ""
    return words[0].lower() + "".join(_title(w) for w in words[1:])


def lower_first(name: str) -> str:
    """``StudentCourse`` -> ``studentCourse``."""
    return name[:1].lower() + name[1:]


def pluralize(name: str) -> str:
    # Single suffix only; irregular plurals are not attempted.
    return f"{name}s"
