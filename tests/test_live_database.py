"""Checks against a real PostgreSQL server; skipped unless one is configured."""

from __future__ import annotations

import os

import pytest

from immutable_pg import Connection, DriverQueryError
from immutable_pg.config import load_settings
from immutable_pg.testing import RecordingLogClient

pytestmark = pytest.mark.skipif(
    not os.environ.get("DB_HOST"),
    reason="set DB_HOST (and DB_NAME, DB_USER, DB_PASS) to run live database tests",
)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def connection_params() -> dict[str, object]:
    return load_settings().connection_params()


@pytest.mark.anyio
async def test_select_current_timestamp(connection_params: dict[str, object]) -> None:
    connection = Connection(connection_params)
    try:
        result = await connection.query("SELECT CURRENT_TIMESTAMP AS time")
    finally:
        await connection.close()

    assert len(result) == 1
    assert result[0]["time"]
    assert result.info.num_rows == "1"
    assert result.info.affected_rows == "1"
    assert result.info.insert_id == "0"


@pytest.mark.anyio
async def test_syntax_error_is_logged(connection_params: dict[str, object]) -> None:
    sink = RecordingLogClient()
    connection = Connection(connection_params, {"logClient": sink})
    try:
        with pytest.raises(DriverQueryError, match="syntax error"):
            await connection.query("SELEKT 1")
    finally:
        await connection.close()

    [start] = sink.of_type("dbQuery")
    [response] = sink.of_type("dbResponse")
    assert response["dbQueryId"] == start["dbQueryId"]
    assert response["dbResponseSuccess"] is False
    assert response["data"]["code"] == "42601"
    assert response["data"]["isOperational"] is True


@pytest.mark.anyio
async def test_named_params_are_bound(connection_params: dict[str, object]) -> None:
    connection = Connection(connection_params)
    try:
        result = await connection.query("SELECT :a::int + :b::int AS total, NULL AS nothing", {"a": 2, "b": 3})
    finally:
        await connection.close(force=True)

    assert result == [{"total": 5}]
