"""Connection settings loading helpers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import tomllib

from pydantic import BaseModel, ValidationError

LOG = logging.getLogger(__name__)

CONFIG_FILE = Path.home() / ".config" / "immutable-pg" / "config.toml"

ENV_OVERRIDES = {
    "DB_HOST": "host",
    "DB_PORT": "port",
    "DB_NAME": "database",
    "DB_USER": "user",
    "DB_PASS": "password",
}


class DatabaseSettings(BaseModel):
    """Shape of the ``[database]`` table in config.toml."""

    host: str = "localhost"
    port: int = 5432
    database: str = "test"
    user: str = "postgres"
    password: str = ""
    timeout: float | None = None
    ssl: str | None = None

    def connection_params(self) -> dict[str, Any]:
        """Keyword arguments for :func:`asyncpg.connect`."""

        params: dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "database": self.database,
            "user": self.user,
        }
        if self.password:
            params["password"] = self.password
        if self.timeout is not None:
            params["timeout"] = self.timeout
        if self.ssl:
            params["ssl"] = self.ssl
        return params


def load_settings(environ: Mapping[str, str] | None = None) -> DatabaseSettings:
    """Load settings from disk and the environment; fall back to defaults."""

    try:
        data = _read_config_file()
    except FileNotFoundError:
        data = {}
    except (tomllib.TOMLDecodeError, OSError):
        data = {}

    try:
        settings = DatabaseSettings(**data)
    except ValidationError:
        settings = DatabaseSettings()

    env = os.environ if environ is None else environ
    for variable, field in ENV_OVERRIDES.items():
        value = env.get(variable)
        if not value:
            continue
        try:
            settings = DatabaseSettings(**{**settings.model_dump(), field: value})
        except ValidationError:
            LOG.warning("Ignoring invalid environment override", extra={"variable": variable})
    return settings


def _read_config_file() -> dict[str, object]:
    with CONFIG_FILE.open("rb") as handle:
        raw = tomllib.load(handle)
    data: dict[str, object] = {}
    database = raw.get("database") if isinstance(raw, dict) else None
    if isinstance(database, dict):
        for key in ("host", "database", "user", "password", "ssl"):
            value = database.get(key)
            if isinstance(value, str):
                data[key] = value
        port = database.get("port")
        if isinstance(port, int):
            data["port"] = port
        timeout = database.get("timeout")
        if isinstance(timeout, (int, float)) and not isinstance(timeout, bool):
            data["timeout"] = float(timeout)
    return data


__all__ = ["CONFIG_FILE", "DatabaseSettings", "load_settings"]
