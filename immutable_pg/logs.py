"""Build lifecycle events and forward them to a connection's log client.

Every function here is a no-op for a connection without a log client. Query
events are also skipped when the query options carry ``log: False``. Payload
keys are camelCase because they are consumed as-is by downstream log
processors.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Mapping

from .identity import micro_timestamp
from .models import ResultRows, UniqueId

if TYPE_CHECKING:
    from .connection import Connection

DB_CONNECTION = "dbConnection"
DB_QUERY = "dbQuery"
DB_RESPONSE = "dbResponse"


def log_connection(connection: "Connection") -> None:
    """Emit the ``dbConnection`` event describing a new connection."""

    if connection.log_client is None:
        return
    connection.log_client.log(
        DB_CONNECTION,
        {
            "connectionName": connection.connection_name,
            "connectionNum": connection.connection_num,
            "connectionParams": connection.connection_params,
            "connectionCreateTime": connection.connection_create_time,
            "connectionId": connection.connection_id,
            "instanceId": connection.instance_id,
        },
    )


def log_query_start(
    connection: "Connection",
    query: str,
    params: Mapping[str, Any],
    options: Mapping[str, Any],
    session: Mapping[str, Any],
    query_id: UniqueId,
) -> None:
    """Emit the ``dbQuery`` event before the query is dispatched."""

    if not _should_log(connection, options):
        return
    connection.log_client.log(
        DB_QUERY,
        {
            "connectionId": connection.connection_id,
            "dbQueryCreateTime": query_id.timestamp,
            "dbQueryId": query_id.id,
            "moduleCallId": session.get("moduleCallId"),
            "options": options,
            "params": params,
            "query": query,
            "requestId": session.get("requestId"),
        },
    )


def log_query_result(
    connection: "Connection",
    query_id: UniqueId,
    options: Mapping[str, Any],
    result: ResultRows | BaseException,
    success: bool,
) -> None:
    """Emit the ``dbResponse`` event for a settled query."""

    if not _should_log(connection, options):
        return
    if success:
        info = getattr(result, "info", None)
        payload: dict[str, Any] = {
            "data": result,
            "dbQueryId": query_id.id,
            "dbResponseCreateTime": micro_timestamp(),
            "dbResponseSuccess": True,
            "info": info.as_payload() if hasattr(info, "as_payload") else info,
        }
    else:
        payload = {
            "data": _error_data(result),
            "dbQueryId": query_id.id,
            "dbResponseCreateTime": micro_timestamp(),
            "dbResponseSuccess": False,
        }
    connection.log_client.log(DB_RESPONSE, payload)


def _should_log(connection: "Connection", options: Mapping[str, Any]) -> bool:
    return connection.log_client is not None and options.get("log") is not False


def _error_data(err: Any) -> dict[str, Any]:
    is_operational = getattr(err, "is_operational", None)
    if is_operational is None:
        is_operational = getattr(err, "isOperational", None)
    message = getattr(err, "message", None)
    if not isinstance(message, str):
        message = str(err)
    return {
        "code": getattr(err, "code", None),
        "isOperational": is_operational,
        "message": message,
    }


__all__ = [
    "DB_CONNECTION",
    "DB_QUERY",
    "DB_RESPONSE",
    "log_connection",
    "log_query_result",
    "log_query_start",
]
