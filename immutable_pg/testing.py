"""Helpers for tests that exercise logged connections."""

from __future__ import annotations

from typing import Any, Mapping


class RecordingLogClient:
    """Log client that keeps every event and error in memory."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Mapping[str, Any]]] = []
        self.errors: list[BaseException] = []

    def log(self, event_type: str, payload: Mapping[str, Any]) -> None:
        self.events.append((event_type, payload))

    def error(self, err: BaseException) -> None:
        self.errors.append(err)

    def of_type(self, event_type: str) -> list[Mapping[str, Any]]:
        """Payloads of the recorded events with the given type."""

        return [payload for kind, payload in self.events if kind == event_type]

    @property
    def event_types(self) -> list[str]:
        return [kind for kind, _ in self.events]


__all__ = ["RecordingLogClient"]
