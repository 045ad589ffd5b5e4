"""Driver adapter running queries against PostgreSQL via asyncpg."""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Callable, Mapping, Protocol, runtime_checkable

import asyncpg

from .errors import DriverConnectionError, DriverQueryError
from .models import QueryInfo, ResultRows

LOG = logging.getLogger(__name__)

ErrorListener = Callable[[BaseException], None]

_NAMED_PARAM = re.compile(
    r"'(?:''|[^'])*'"
    r'|"(?:""|[^"])*"'
    r"|--[^\n]*"
    r"|/\*.*?\*/"
    r"|(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)",
    re.DOTALL,
)


@runtime_checkable
class DriverClient(Protocol):
    """Interface the connection manager expects from a database driver."""

    async def query(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> ResultRows:
        """Run a query and return its rows with execution info attached."""

    async def end(self) -> None:
        """Close after in-flight work completes."""

    def destroy(self) -> None:
        """Close immediately without draining."""

    def subscribe_errors(self, listener: ErrorListener) -> Callable[[], None]:
        """Subscribe to connection-level errors; returns an unsubscribe handle."""


class AsyncpgClient:
    """Single asyncpg connection opened lazily on the first query.

    ``connection_params`` are handed to :func:`asyncpg.connect` untouched.
    """

    def __init__(self, connection_params: Mapping[str, Any]) -> None:
        self._params = dict(connection_params)
        self._conn: asyncpg.Connection | None = None
        self._connecting: asyncio.Task[asyncpg.Connection] | None = None
        self._closing = False
        self._listeners: set[ErrorListener] = set()

    @property
    def connected(self) -> bool:
        return self._conn is not None and not self._conn.is_closed()

    def subscribe_errors(self, listener: ErrorListener) -> Callable[[], None]:
        self._listeners.add(listener)

        def _unsubscribe() -> None:
            self._listeners.discard(listener)

        return _unsubscribe

    async def query(
        self,
        query: str,
        params: Mapping[str, Any] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> ResultRows:
        conn = await self._ensure_connected()
        statement_text, args = bind_named_params(query, params or {})
        timeout = (options or {}).get("timeout")
        try:
            statement = await conn.prepare(statement_text, timeout=timeout)
            records = await statement.fetch(*args, timeout=timeout)
        except asyncpg.PostgresError as exc:
            raise DriverQueryError(str(exc), code=exc.sqlstate) from exc
        except asyncpg.InterfaceError as exc:
            raise DriverQueryError(str(exc), is_operational=False) from exc
        info = parse_status(statement.get_statusmsg(), len(records))
        return ResultRows((dict(record) for record in records), info=info)

    async def end(self) -> None:
        self._closing = True
        conn = self._conn
        if conn is None and self._connecting is not None:
            try:
                conn = await self._connecting
            except DriverConnectionError:
                # Already reported to the error listeners when the connect failed.
                return
        if conn is not None:
            await conn.close()

    def destroy(self) -> None:
        self._closing = True
        if self._connecting is not None and not self._connecting.done():
            self._connecting.cancel()
        if self._conn is not None:
            self._conn.terminate()

    async def _ensure_connected(self) -> asyncpg.Connection:
        if self._conn is not None:
            return self._conn
        task = self._connecting
        if task is None:
            task = self._connecting = asyncio.get_running_loop().create_task(self._open())
        try:
            return await task
        except asyncio.CancelledError:
            if self._closing:
                raise DriverConnectionError("Connection destroyed") from None
            raise
        except DriverConnectionError:
            if self._connecting is task:
                self._connecting = None
            raise

    async def _open(self) -> asyncpg.Connection:
        LOG.debug("Opening asyncpg connection", extra={"host": self._params.get("host")})
        try:
            conn = await asyncpg.connect(**self._params)
        except Exception as exc:
            error = DriverConnectionError(
                f"Failed to connect: {exc}",
                code=getattr(exc, "sqlstate", None),
            )
            error.__cause__ = exc
            self._emit_error(error)
            raise error from exc
        conn.add_termination_listener(self._on_termination)
        self._conn = conn
        return conn

    def _on_termination(self, _conn: asyncpg.Connection) -> None:
        self._conn = None
        self._connecting = None
        if self._closing:
            return
        self._emit_error(DriverConnectionError("Connection terminated unexpectedly"))

    def _emit_error(self, err: BaseException) -> None:
        for listener in tuple(self._listeners):
            listener(err)


def bind_named_params(query: str, params: Mapping[str, Any]) -> tuple[str, list[Any]]:
    """Rewrite ``:name`` placeholders to asyncpg's ``$n`` form.

    Only names present in ``params`` are rewritten; a repeated name reuses its
    position. Quoted literals, quoted identifiers, comments and ``::type``
    casts are left untouched.
    """

    if not params:
        return query, []
    positions: dict[str, int] = {}
    args: list[Any] = []

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name is None or name not in params:
            return match.group(0)
        if name not in positions:
            args.append(params[name])
            positions[name] = len(args)
        return f"${positions[name]}"

    return _NAMED_PARAM.sub(_replace, query), args


def parse_status(status: str | None, row_count: int) -> QueryInfo:
    """Turn a command status tag such as ``INSERT 0 1`` into :class:`QueryInfo`."""

    parts = (status or "").split()
    affected = parts[-1] if parts and parts[-1].isdigit() else "0"
    insert_id = parts[1] if len(parts) == 3 and parts[0].upper() == "INSERT" else "0"
    return QueryInfo(num_rows=str(row_count), affected_rows=affected, insert_id=insert_id)


__all__ = [
    "AsyncpgClient",
    "DriverClient",
    "ErrorListener",
    "bind_named_params",
    "parse_status",
]
