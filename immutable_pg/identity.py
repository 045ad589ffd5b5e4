"""Timestamped identifiers for connections, queries and the running process."""

from __future__ import annotations

import os
import random
import string
from datetime import datetime, timezone

from .models import UniqueId

ID_LENGTH = 32
ID_ALPHABET = string.digits + string.ascii_uppercase
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"

_random = random.Random()


def micro_timestamp(moment: datetime | None = None) -> str:
    """Format a moment (default: now, UTC) with microsecond precision."""

    moment = moment or datetime.now(tz=timezone.utc)
    return moment.strftime(TIMESTAMP_FORMAT)


def new_unique_id() -> UniqueId:
    """Return a fresh 32-character id together with its creation timestamp."""

    moment = datetime.now(tz=timezone.utc)
    micros = int(moment.timestamp() * 1_000_000)
    prefix = _base36(micros)
    suffix = "".join(_random.choices(ID_ALPHABET, k=ID_LENGTH - len(prefix)))
    return UniqueId(id=prefix + suffix, timestamp=micro_timestamp(moment))


def _base36(value: int) -> str:
    digits: list[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(ID_ALPHABET[remainder])
    return "".join(reversed(digits)) or "0"


INSTANCE_ID = os.environ.get("IMMUTABLE_PG_INSTANCE_ID") or new_unique_id().id


__all__ = ["INSTANCE_ID", "ID_LENGTH", "micro_timestamp", "new_unique_id"]
