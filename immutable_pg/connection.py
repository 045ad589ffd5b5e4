"""Logged, validated database connection wrapping the driver client."""

from __future__ import annotations

import logging
import re
from typing import Any, Awaitable, Callable, Mapping

from .automock import DEFAULT_REGISTRY, AutomockRegistry
from .client import AsyncpgClient, DriverClient
from .errors import InvalidArgumentError
from .identity import INSTANCE_ID, new_unique_id
from .logs import log_connection, log_query_result, log_query_start
from .models import LogClient, ResultRows, UniqueId
from .normalize import normalize_rows
from .validation import MISSING, require_valid_log_client, require_valid_optional_object

LOG = logging.getLogger(__name__)

ClientFactory = Callable[[Mapping[str, Any]], DriverClient]

_INSERT_STATEMENT = re.compile(r"^\s*INSERT", re.IGNORECASE)


class Connection:
    """One logical database connection.

    Construction validates ``options``, assigns the connection id, emits the
    ``dbConnection`` event when a ``logClient`` is given, builds the driver
    client from ``connection_params`` and finally hands the new instance to
    the active automock installer.
    """

    def __init__(
        self,
        connection_params: Mapping[str, Any],
        options: Any = MISSING,
        *,
        automock: AutomockRegistry | None = None,
        client_factory: ClientFactory = AsyncpgClient,
    ) -> None:
        options = require_valid_optional_object(options, name="options")
        log_client: LogClient | None = options.get("logClient")
        if log_client is not None:
            require_valid_log_client(log_client)
        unique_id = new_unique_id()
        self.connection_name: str | None = options.get("connectionName")
        self.connection_num: int = options.get("connectionNum") or 0
        self.connection_params = connection_params
        self._connection_create_time = unique_id.timestamp
        self._connection_id = unique_id.id
        self.instance_id = INSTANCE_ID
        self.log_client: LogClient | None = None
        if log_client is not None:
            # Logged before the driver client is built.
            self.log_client = log_client
            log_connection(self)
        self.client: DriverClient = client_factory(connection_params)
        self._unsubscribe_errors = self.client.subscribe_errors(self._handle_driver_error)
        (automock or DEFAULT_REGISTRY).apply(self)

    @property
    def connection_id(self) -> str:
        return self._connection_id

    @property
    def connection_create_time(self) -> str:
        return self._connection_create_time

    def query(
        self,
        query: Any = MISSING,
        params: Any = MISSING,
        options: Any = MISSING,
        session: Any = MISSING,
    ) -> Awaitable[ResultRows | None]:
        """Validate, log and dispatch a query; await the result for its rows.

        Argument errors raise :class:`InvalidArgumentError` immediately, before
        anything is awaited. Driver errors are logged and then re-raised
        unchanged from the awaited result.
        """

        if not isinstance(query, str):
            raise InvalidArgumentError(f"query must be a string, got {type(query).__name__}")
        options = require_valid_optional_object(options, name="options")
        params = require_valid_optional_object(params, name="params")
        session = require_valid_optional_object(session, name="session")
        if session.get("noInsert") and _INSERT_STATEMENT.match(query):
            LOG.debug("Skipping insert for noInsert session", extra={"connection_id": self.connection_id})
            return _skipped()
        query_id = new_unique_id()
        log_query_start(self, query, params, options, session, query_id)
        return self._dispatch(query, params, options, query_id)

    async def close(self, force: bool = False) -> None:
        """Release the driver connection, draining in-flight queries unless ``force``."""

        try:
            if force:
                self.client.destroy()
            else:
                await self.client.end()
        finally:
            self._unsubscribe_errors()

    async def __aenter__(self) -> "Connection":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _dispatch(
        self,
        query: str,
        params: Mapping[str, Any],
        options: Mapping[str, Any],
        query_id: UniqueId,
    ) -> ResultRows:
        try:
            result = await self.client.query(query, params, options)
        except Exception as exc:
            log_query_result(self, query_id, options, exc, False)
            raise
        normalize_rows(result)
        log_query_result(self, query_id, options, result, True)
        return result

    def _handle_driver_error(self, err: BaseException) -> None:
        if self.log_client is not None:
            self.log_client.error(err)
            return
        LOG.error(
            "Database connection error",
            exc_info=err,
            extra={"connection_id": self.connection_id},
        )

    def __repr__(self) -> str:
        return (
            f"Connection(connection_id={self.connection_id!r}, "
            f"connection_name={self.connection_name!r}, connection_num={self.connection_num!r})"
        )


async def _skipped() -> None:
    return None


__all__ = ["ClientFactory", "Connection"]
