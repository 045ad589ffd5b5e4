"""Test-time hook that lets callers replace query execution on new connections.

The slot is set rarely and read on every connection construction. It is never
mutated during steady-state query traffic, so no locking is done.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from .errors import InvalidArgumentError

if TYPE_CHECKING:
    from .connection import Connection

LOG = logging.getLogger(__name__)

AutomockInstaller = Callable[["Connection"], object]


class AutomockRegistry:
    """Holds at most one installer applied to every new connection."""

    def __init__(self) -> None:
        self._installer: AutomockInstaller | None = None

    @property
    def installer(self) -> AutomockInstaller | None:
        return self._installer

    def set(self, installer: AutomockInstaller | None) -> None:
        """Replace the active installer; ``None`` clears it."""

        if installer is not None and not callable(installer):
            raise InvalidArgumentError("automock installer must be callable")
        self._installer = installer
        LOG.debug("Automock installer updated", extra={"installed": installer is not None})

    def reset(self) -> None:
        """Clear the installer."""

        self._installer = None

    def apply(self, connection: "Connection") -> None:
        """Run the active installer, if any, against a new connection."""

        installer = self._installer
        if installer is None:
            return
        installer(connection)


DEFAULT_REGISTRY = AutomockRegistry()


def get_automock() -> AutomockInstaller | None:
    """Return the process-wide installer."""

    return DEFAULT_REGISTRY.installer


def set_automock(installer: AutomockInstaller | None) -> None:
    """Set the process-wide installer used by connections built from now on."""

    DEFAULT_REGISTRY.set(installer)


def reset_automock_and_state() -> None:
    """Clear all process-wide state; call between independent test runs."""

    DEFAULT_REGISTRY.reset()


__all__ = [
    "AutomockInstaller",
    "AutomockRegistry",
    "DEFAULT_REGISTRY",
    "get_automock",
    "reset_automock_and_state",
    "set_automock",
]
