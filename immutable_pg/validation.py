"""Argument checks shared by connection construction and queries."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from typing import Any

from .errors import InvalidArgumentError


class _Missing(Enum):
    MISSING = "MISSING"

    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing.MISSING
"""Marks an optional argument the caller did not pass (distinct from ``None``)."""


def require_valid_optional_object(value: Any = MISSING, *, name: str = "argument") -> Mapping[str, Any]:
    """Return ``value`` if it is a mapping, a new dict if it was omitted.

    ``None``, booleans, numbers, strings and sequences are all rejected with
    :class:`InvalidArgumentError`.
    """

    if value is MISSING:
        return {}
    if isinstance(value, Mapping):
        return value
    raise InvalidArgumentError(f"{name} must be a mapping, got {type(value).__name__}")


def require_valid_log_client(client: Any) -> Any:
    """Ensure ``client`` exposes callable ``log`` and ``error`` members."""

    for member in ("log", "error"):
        if not callable(getattr(client, member, None)):
            raise InvalidArgumentError(f"log client must have a callable '{member}' method")
    return client


__all__ = ["MISSING", "require_valid_log_client", "require_valid_optional_object"]
