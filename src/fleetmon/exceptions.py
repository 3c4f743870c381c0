"""
Domain exceptions raised by the collection and notification engine.

All of them are handled locally by the component that observes them: a
puller logs them, a collector folds them into its cycle outcome, and the
event center logs and drops. None is meant to terminate the process.
"""

from typing import Optional


class FleetmonError(Exception):
    """Base class for all fleetmon errors."""


class TransportError(FleetmonError):
    """The remote agent could not be reached or returned an unusable reply."""

    def __init__(self, message: str, address: Optional[str] = None, port: Optional[int] = None):
        super().__init__(message)
        self.address = address
        self.port = port


class ProtocolError(FleetmonError):
    """The reply reached us but does not match the commands that were sent."""


class CommandError(FleetmonError):
    """A daemon executed a command and reported a non-success result."""

    def __init__(self, command: str, daemon: Optional[str], result: int, text: str):
        super().__init__(
            f"command {command} failed on daemon {daemon or '<unknown>'}: "
            f"result={result}, text={text!r}"
        )
        self.command = command
        self.daemon = daemon
        self.result = result
        self.text = text


class StorageError(FleetmonError):
    """The storage collaborator rejected a read or a write."""


class SettingError(StorageError):
    """A setting is missing or was accessed with the wrong type."""
