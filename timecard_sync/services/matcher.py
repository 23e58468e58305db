from __future__ import annotations

import re
from collections.abc import Callable
from typing import TypeAlias

"""String equivalence used to match desired combos against host rows.

equivalent() is symmetric but not transitive ("dev" ~ "development" and
"dev" ~ "devops" does not give "development" ~ "devops"); callers must not
reuse match results across candidates.
"""

__all__ = [
    "Matcher",
    "combo_key",
    "equivalent",
    "exact",
    "normalize_text",
]

Matcher: TypeAlias = Callable[[str, str], bool]

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(value: object) -> str:
    """Lowercase, collapse internal whitespace and trim. None -> ""."""
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value).lower()).strip()


def equivalent(a: object, b: object) -> bool:
    """Return True when normalized a and b are equal or one contains the other.

    Blank inputs never equate.
    """
    left = normalize_text(a)
    right = normalize_text(b)
    if not left or not right:
        return False
    if left == right:
        return True
    return left in right or right in left


def exact(a: object, b: object) -> bool:
    """Stricter matcher: normalized equality only."""
    left = normalize_text(a)
    return bool(left) and left == normalize_text(b)


def combo_key(project: object, task: object, hour_type: object) -> tuple[str, str, str]:
    return (normalize_text(project), normalize_text(task), normalize_text(hour_type))
