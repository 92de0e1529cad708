"""Shared exception types for Pulse."""


class PulseError(Exception):
    """Base class for all Pulse errors."""


class ConnectError(PulseError):
    """Raised when a remote session cannot be established."""


class NoAuthMethodError(ConnectError):
    """Raised when no usable authentication method exists for a host."""


class CommandError(PulseError):
    """Raised when a remote command fails or exits non-zero."""


class StoreError(PulseError):
    """Base class for dispatch store errors."""


class StoreFormatError(StoreError):
    """Raised when the persisted dispatch file cannot be parsed."""


class AssignmentNotFoundError(StoreError, KeyError):
    """Raised when an assignment id does not exist in the store."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message instead.
        return str(self.args[0]) if self.args else ""
