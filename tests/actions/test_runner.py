"""Tests for actions/runner.py. These spawn real processes."""

import asyncio
import signal
from unittest.mock import patch

import pytest

from actions.exceptions import (
    CommandNotFoundError,
    NonZeroExitError,
    ScriptTimeoutError,
    SubstitutionError,
)
from actions.models import TIMEOUT_OUTPUT
from actions.runner import (
    DEFAULT_TIMEOUT,
    describe_returncode,
    execute,
    interpret_returncode,
    script_exec,
)
from messaging.models import Action, Message, MessageType


class TestInterpretReturncode:
    def test_success(self):
        assert interpret_returncode(0) == 0

    def test_plain_exit_code(self):
        assert interpret_returncode(3) == 3

    def test_signal_maps_to_128_plus_signum(self):
        assert interpret_returncode(-signal.SIGKILL) == 128 + signal.SIGKILL

    def test_describe(self):
        assert describe_returncode(2) == "exit status 2"
        assert describe_returncode(-signal.SIGTERM) == "signal: SIGTERM"


@pytest.mark.asyncio
async def test_echo_success():
    result = await execute("echo hello", {}, 5)
    assert result.status == 0
    assert result.output == "hello"


@pytest.mark.asyncio
async def test_output_is_trimmed():
    result = await execute("printf '  padded \\n\\n'", {}, 5)
    assert result.output == "padded"


@pytest.mark.asyncio
async def test_quoted_argument_preserved():
    result = await execute('echo "hello   world"', {}, 5)
    assert result.output == "hello   world"


@pytest.mark.asyncio
async def test_variables_substituted():
    result = await execute("echo ${_user.name}", {"_user.name": "ana"}, 5)
    assert result.output == "ana"


@pytest.mark.asyncio
async def test_substitution_failure_does_not_run():
    with patch("actions.runner.asyncio.create_subprocess_exec") as spawn:
        with pytest.raises(SubstitutionError) as exc_info:
            await execute("echo ${missing}", {}, 5)
    spawn.assert_not_called()
    assert exc_info.value.result.status == 1


@pytest.mark.asyncio
async def test_timeout_kills_process():
    real_spawn = asyncio.create_subprocess_exec
    spawned = []

    async def tracking_spawn(*args, **kwargs):
        proc = await real_spawn(*args, **kwargs)
        spawned.append(proc)
        return proc

    with patch("actions.runner.asyncio.create_subprocess_exec", tracking_spawn):
        with pytest.raises(ScriptTimeoutError) as exc_info:
            await execute("sleep 30", {}, 1)

    result = exc_info.value.result
    assert result.status == 1
    assert result.output == TIMEOUT_OUTPUT
    assert isinstance(exc_info.value, TimeoutError)
    assert len(spawned) == 1
    # Reaped: the child is no longer running
    assert spawned[0].returncode is not None


@pytest.mark.asyncio
async def test_missing_binary():
    with pytest.raises(CommandNotFoundError) as exc_info:
        await execute("/no/such/binary", {}, 5)
    result = exc_info.value.result
    assert result.status == 127
    assert "/no/such/binary" in result.output


@pytest.mark.asyncio
async def test_empty_command_is_not_found():
    with pytest.raises(CommandNotFoundError) as exc_info:
        await execute("   ", {}, 5)
    assert exc_info.value.result.status == 127


@pytest.mark.asyncio
async def test_nonzero_exit_uses_stderr():
    with pytest.raises(NonZeroExitError) as exc_info:
        await execute("sh -c 'echo broke >&2; exit 3'", {}, 5)
    assert exc_info.value.status == 3
    assert exc_info.value.result.output == "broke"


@pytest.mark.asyncio
async def test_nonzero_exit_prefers_stdout():
    with pytest.raises(NonZeroExitError) as exc_info:
        await execute("sh -c 'echo partial; echo broke >&2; exit 4'", {}, 5)
    assert exc_info.value.result.status == 4
    assert exc_info.value.result.output == "partial"


@pytest.mark.asyncio
async def test_nonzero_exit_without_output_describes_status():
    with pytest.raises(NonZeroExitError) as exc_info:
        await execute("sh -c 'exit 2'", {}, 5)
    assert exc_info.value.result.output == "exit status 2"


@pytest.mark.asyncio
async def test_signal_terminated_status():
    with pytest.raises(NonZeroExitError) as exc_info:
        await execute("sh -c 'kill -9 $$'", {}, 5)
    assert exc_info.value.result.status == 128 + signal.SIGKILL
    assert exc_info.value.result.output == "signal: SIGKILL"


@pytest.mark.asyncio
async def test_default_timeout_used_for_zero():
    captured = {}
    real_wait_for = asyncio.wait_for

    async def capturing_wait_for(aw, timeout):
        captured["timeout"] = timeout
        return await real_wait_for(aw, timeout)

    with patch("actions.runner.asyncio.wait_for", capturing_wait_for):
        await execute("true", {}, 0)
    assert captured["timeout"] == DEFAULT_TIMEOUT


@pytest.mark.asyncio
async def test_script_exec_uses_message_vars():
    action = Action(name="greet", cmd="echo hi ${_user.name}", timeout=5)
    message = Message(
        id="m1",
        type=MessageType.channel,
        channel_id="C1",
        vars={"_user.name": "bo"},
    )
    result = await script_exec(action, message)
    assert result.status == 0
    assert result.output == "hi bo"


@pytest.mark.asyncio
async def test_script_exec_reraises():
    action = Action(name="fail", cmd="sh -c 'exit 5'", timeout=5)
    message = Message(id="m2", type=MessageType.direct, channel_id="D1")
    with pytest.raises(NonZeroExitError):
        await script_exec(action, message)
