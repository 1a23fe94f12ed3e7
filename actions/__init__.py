"""Exec actions: variable substitution, command lexing and process execution."""

from .exceptions import (
    CommandNotFoundError,
    NonZeroExitError,
    ScriptError,
    ScriptTimeoutError,
    SubstitutionError,
)
from .models import ScriptResult
from .runner import execute, interpret_returncode, script_exec
from .substitution import substitute
from .tokenizer import tokenize

__all__ = [
    "CommandNotFoundError",
    "NonZeroExitError",
    "ScriptError",
    "ScriptResult",
    "ScriptTimeoutError",
    "SubstitutionError",
    "execute",
    "interpret_returncode",
    "script_exec",
    "substitute",
    "tokenize",
]
