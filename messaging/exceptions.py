"""Remote-level errors. These are logged and absorbed, never raised to rules."""


class RemoteError(Exception):
    """Base class for remote adapter failures."""


class AuthenticationError(RemoteError):
    """Platform credentials are missing, invalid or unauthorized."""


class ConfigurationError(RemoteError):
    """A transport or callback path is missing or invalid."""


class TransientRemoteError(RemoteError):
    """A best-effort platform call (e.g. reactions) failed."""

    def __init__(self, message: str, *, operation: str = ""):
        super().__init__(message)
        self.operation = operation
