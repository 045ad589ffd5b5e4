"""Shared fixtures: automock isolation and a fake asyncpg connection."""

from __future__ import annotations

from typing import Any, Callable, Iterator

import pytest

from immutable_pg import reset_automock_and_state


@pytest.fixture(autouse=True)
def _reset_automock() -> Iterator[None]:
    reset_automock_and_state()
    yield
    reset_automock_and_state()


class FakeStatement:
    def __init__(self, rows: list[dict[str, Any]], status: str) -> None:
        self.rows = rows
        self.status = status
        self.args: tuple[Any, ...] = ()
        self.timeout: float | None = None

    async def fetch(self, *args: Any, timeout: float | None = None) -> list[dict[str, Any]]:
        self.args = args
        self.timeout = timeout
        return [dict(row) for row in self.rows]

    def get_statusmsg(self) -> str:
        return self.status


class FakeConnection:
    def __init__(self) -> None:
        self.rows: list[dict[str, Any]] = []
        self.status = "SELECT 0"
        self.error: BaseException | None = None
        self.connect_calls: list[dict[str, Any]] = []
        self.statements: list[tuple[str, FakeStatement]] = []
        self.closed = False
        self.terminated = False
        self._listeners: list[Callable[[Any], None]] = []

    async def prepare(self, sql: str, *, timeout: float | None = None) -> FakeStatement:
        if self.error is not None:
            raise self.error
        statement = FakeStatement(self.rows, self.status)
        self.statements.append((sql, statement))
        return statement

    def add_termination_listener(self, callback: Callable[[Any], None]) -> None:
        self._listeners.append(callback)

    def is_closed(self) -> bool:
        return self.closed or self.terminated

    async def close(self) -> None:
        self.closed = True
        self._fire_termination()

    def terminate(self) -> None:
        self.terminated = True
        self._fire_termination()

    def drop(self) -> None:
        """Simulate the server going away."""

        self._fire_termination()

    def _fire_termination(self) -> None:
        for callback in tuple(self._listeners):
            callback(self)


@pytest.fixture
def fake_connection(monkeypatch: pytest.MonkeyPatch) -> FakeConnection:
    connection = FakeConnection()

    async def _connect(**kwargs: Any) -> FakeConnection:
        connection.connect_calls.append(kwargs)
        return connection

    monkeypatch.setattr("immutable_pg.client.asyncpg.connect", _connect)
    return connection
