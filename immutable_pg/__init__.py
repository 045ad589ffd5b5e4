"""Logged, validated connections in front of the asyncpg driver."""

from __future__ import annotations

__version__ = "0.1.0"

from .automock import AutomockRegistry, get_automock, reset_automock_and_state, set_automock
from .connection import Connection
from .errors import DriverConnectionError, DriverError, DriverQueryError, InvalidArgumentError
from .models import LogClient, QueryInfo, ResultRows, UniqueId
from .validation import MISSING

__all__ = [
    "AutomockRegistry",
    "Connection",
    "DriverConnectionError",
    "DriverError",
    "DriverQueryError",
    "InvalidArgumentError",
    "LogClient",
    "MISSING",
    "QueryInfo",
    "ResultRows",
    "UniqueId",
    "__version__",
    "get_automock",
    "reset_automock_and_state",
    "set_automock",
]
