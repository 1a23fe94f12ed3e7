"""Script execution result model."""

from dataclasses import dataclass

# Exit status reported when a command was never started
STATUS_NOT_FOUND = 127
# Pre-call status, kept on timeout and substitution failure
STATUS_DEFAULT = 1

TIMEOUT_OUTPUT = "Hmm, something timed out. Please try again."


@dataclass
class ScriptResult:
    """Normalized outcome of one command execution."""

    status: int = STATUS_DEFAULT
    output: str = ""
