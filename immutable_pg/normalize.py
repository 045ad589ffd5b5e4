"""In-place cleanup of driver result rows."""

from __future__ import annotations

from typing import Any, Iterable, MutableMapping


def normalize_rows(rows: Iterable[MutableMapping[str, Any]] | None) -> None:
    """Drop SQL NULL fields from every row so they read as absent."""

    if rows is None:
        return
    for row in rows:
        for key in [key for key, value in row.items() if value is None]:
            del row[key]


__all__ = ["normalize_rows"]
