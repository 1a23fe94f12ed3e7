"""Errors returned to the caller of script execution."""

from .models import ScriptResult


class ScriptError(Exception):
    """Base class for exec failures. Carries the normalized result."""

    def __init__(self, message: str, result: ScriptResult | None = None):
        super().__init__(message)
        self.result = result if result is not None else ScriptResult()


class SubstitutionError(ScriptError):
    """A ${variable} in the command template has no value."""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []


class ScriptTimeoutError(ScriptError, TimeoutError):
    """The command exceeded its deadline and was killed."""


class CommandNotFoundError(ScriptError):
    """The executable could not be found or started."""


class NonZeroExitError(ScriptError):
    """The command ran but exited with a non-zero status."""

    @property
    def status(self) -> int:
        return self.result.status
