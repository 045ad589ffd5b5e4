"""Shared dataclasses and protocols used across connection modules."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Protocol, runtime_checkable

Row = dict[str, Any]


@dataclass(frozen=True, slots=True)
class UniqueId:
    """Identifier paired with the moment it was created."""

    id: str
    timestamp: str


@dataclass(frozen=True, slots=True)
class QueryInfo:
    """Execution metadata reported by the driver, string-encoded."""

    num_rows: str = "0"
    affected_rows: str = "0"
    insert_id: str = "0"

    def as_payload(self) -> dict[str, str]:
        return {
            "numRows": self.num_rows,
            "affectedRows": self.affected_rows,
            "insertId": self.insert_id,
        }


class ResultRows(list[Row]):
    """Rows returned by a query, carrying the driver's execution info."""

    def __init__(self, rows: Iterable[Row] = (), info: QueryInfo | None = None) -> None:
        super().__init__(rows)
        self.info = info or QueryInfo()


@runtime_checkable
class LogClient(Protocol):
    """Sink receiving connection and query lifecycle events."""

    def log(self, event_type: str, payload: Mapping[str, Any]) -> None:
        """Record a structured lifecycle event."""

    def error(self, err: BaseException) -> None:
        """Record a driver error not tied to a single query."""


__all__ = ["LogClient", "QueryInfo", "ResultRows", "Row", "UniqueId"]
