from __future__ import annotations

from typing import Sequence


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so `%` and `_` match literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_search_clause(columns: Sequence[str], term: str, *, wildcards: bool = True) -> tuple[str, list[str]]:
    """Build an OR'ed LIKE clause over `columns` and its parameters.

    >>> build_search_clause(["e.full_name", "e.email"], "50%")
    ('(e.full_name LIKE %s OR e.email LIKE %s)', ['%50\\\\%%', '%50\\\\%%'])
    """
    escaped = escape_like(term)
    value = f"%{escaped}%" if wildcards else escaped
    clause = "(" + " OR ".join(f"{col} LIKE %s" for col in columns) + ")"
    return clause, [value] * len(columns)
