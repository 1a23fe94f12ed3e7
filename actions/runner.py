"""Exec action runner.

Runs one external command per call under a deadline and normalizes the
outcome into a ScriptResult. Exactly one of timeout, lookup failure,
non-zero exit or success applies to each call; the first three raise a
ScriptError subclass with the result attached.
"""

import asyncio
import signal
from collections.abc import Mapping

from loguru import logger

from messaging.models import Action, Message

from .exceptions import (
    CommandNotFoundError,
    NonZeroExitError,
    ScriptError,
    ScriptTimeoutError,
    SubstitutionError,
)
from .models import STATUS_NOT_FOUND, TIMEOUT_OUTPUT, ScriptResult
from .substitution import substitute
from .tokenizer import tokenize

DEFAULT_TIMEOUT = 20


def interpret_returncode(returncode: int) -> int:
    """Map a process return code to a non-negative exit status.

    asyncio reports a process killed by signal N as -N; that becomes
    128 + N, the shell convention.
    """
    if returncode < 0:
        return 128 + (-returncode)
    return returncode


def describe_returncode(returncode: int) -> str:
    if returncode < 0:
        try:
            name = signal.Signals(-returncode).name
        except ValueError:
            name = str(-returncode)
        return f"signal: {name}"
    return f"exit status {returncode}"


def _decode(data: bytes | None) -> str:
    return data.decode("utf-8", errors="replace").strip() if data else ""


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    """Kill the child if it is still running and reap it."""
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
    await proc.wait()


async def execute(
    cmd: str,
    variables: Mapping[str, str] | None = None,
    timeout: int | float | None = 0,
) -> ScriptResult:
    """Substitute, tokenize and run cmd.

    Args:
        cmd: Command template, may reference ${variables}
        variables: Values for the template
        timeout: Deadline in seconds; 0 or None means DEFAULT_TIMEOUT

    Returns:
        ScriptResult with the exit status and trimmed stdout

    Raises:
        SubstitutionError: a referenced variable has no value
        ScriptTimeoutError: the deadline passed; the child was killed
        CommandNotFoundError: the executable could not be started (status 127)
        NonZeroExitError: the command exited non-zero
    """
    timeout = timeout or DEFAULT_TIMEOUT
    result = ScriptResult()

    logger.debug(f"command is: [{cmd}]")
    try:
        processed = substitute(cmd, variables or {})
    except SubstitutionError as e:
        e.result = result
        raise
    logger.debug(f"substituted: [{processed}]")

    argv = tokenize(processed)
    if not argv or not argv[0]:
        result.status = STATUS_NOT_FOUND
        result.output = f"no executable in command: [{processed}]"
        raise CommandNotFoundError(result.output, result=result)

    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        result.status = STATUS_NOT_FOUND
        result.output = str(e).strip()
        raise CommandNotFoundError(result.output, result=result) from e

    try:
        stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        await _terminate(proc)
        result.output = TIMEOUT_OUTPUT
        raise ScriptTimeoutError(
            f"timeout reached after {timeout}s, exec process for [{argv[0]}] cancelled",
            result=result,
        ) from None
    except asyncio.CancelledError:
        await _terminate(proc)
        raise

    out = _decode(stdout)
    returncode = proc.returncode
    if returncode != 0:
        result.status = interpret_returncode(returncode)
        result.output = _decode(stderr) or describe_returncode(returncode)
        # Anything printed to stdout before the failure wins
        if out:
            result.output = out
        raise NonZeroExitError(
            f"process [{argv[0]}] exited with status {result.status}", result=result
        )

    result.status = interpret_returncode(returncode)
    result.output = out
    return result


async def script_exec(action: Action, message: Message) -> ScriptResult:
    """Run an exec action with the message's vars.

    Errors are logged and re-raised so the rule engine can decide what
    to tell the user; nothing is retried.
    """
    with logger.contextualize(action=action.name, message_id=message.id):
        logger.info(f"executing process for action '{action.name}'")
        try:
            result = await execute(action.cmd, message.vars, action.timeout)
        except ScriptError as e:
            logger.debug(
                f"process for action '{action.name}' exited with status "
                f"'{e.result.status}': {e}"
            )
            raise
        logger.info(f"process finished for action '{action.name}'")
        return result
