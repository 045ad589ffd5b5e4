"""Exception types raised by connections and the driver adapter."""

from __future__ import annotations


class InvalidArgumentError(TypeError):
    """Raised synchronously when a caller passes an argument of the wrong shape."""


class DriverError(RuntimeError):
    """Base error for failures reported by the database driver."""

    def __init__(self, message: str, *, code: str | None = None, is_operational: bool = True) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.is_operational = is_operational


class DriverQueryError(DriverError):
    """Raised when the driver fails to execute a query."""


class DriverConnectionError(DriverError):
    """Connection-level failure not tied to a single query."""


__all__ = [
    "DriverConnectionError",
    "DriverError",
    "DriverQueryError",
    "InvalidArgumentError",
]
