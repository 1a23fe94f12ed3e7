"""Platform-agnostic message, rule and bot context models."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MessageType(StrEnum):
    direct = "direct"
    channel = "channel"
    private_channel = "private_channel"
    unknown = "unknown"


# Types a remote is allowed to send; anything else is a rule config mistake
SENDABLE_TYPES = frozenset(
    {MessageType.direct, MessageType.channel, MessageType.private_channel}
)


def message_timestamp() -> datetime:
    return datetime.now(UTC)


@dataclass
class Message:
    """
    Platform-agnostic message.

    Remotes convert platform events to this format; the exec handler
    produces it as synthetic output. Only the component currently holding
    a message mutates it.
    """

    id: str
    type: MessageType
    channel_id: str
    # Platform message reference; together with channel_id it identifies
    # the remote message and is never reassigned
    timestamp: str = ""

    channel_name: str = ""
    input: str = ""
    output: str = ""
    error: str = ""
    thread_timestamp: str | None = None

    bot_mentioned: bool = False
    direct_message_only: bool = False
    is_ephemeral: bool = False
    output_to_rooms: list[str] = field(default_factory=list)
    output_to_users: list[str] = field(default_factory=list)

    vars: dict[str, str] = field(default_factory=dict)
    attributes: dict[str, Any] = field(default_factory=dict)

    start_time: datetime = field(default_factory=message_timestamp)
    end_time: datetime | None = None

    @property
    def user_id(self) -> str | None:
        return self.vars.get("_user.id")


class Rule(BaseModel):
    """A loaded rule. Read-only to this package."""

    name: str
    reaction: str = ""
    remove_reaction: str = ""
    timeout: int = Field(0, ge=0)
    cmd: str = ""
    # Slack block kit payload posted for interactive rules
    blocks: list[dict[str, Any]] = Field(default_factory=list)

    # Trigger fields belong to the rule loader
    model_config = ConfigDict(frozen=True, extra="allow")


class Action(BaseModel):
    """Exec-relevant part of a rule, passed per invocation."""

    name: str
    cmd: str
    timeout: int = Field(0, ge=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_rule(cls, rule: Rule) -> "Action":
        return cls(name=rule.name, cmd=rule.cmd, timeout=rule.timeout)


@dataclass
class Bot:
    """
    Bot context shared with remotes.

    The runtime owns the inbound queue; remotes only put messages on it.
    """

    name: str = "bot"
    id: str = ""
    rooms: dict[str, str] = field(default_factory=dict)
    interactive_components: bool = False
    cli: bool = False
    debug: bool = False
    inbound: asyncio.Queue = field(default_factory=asyncio.Queue)

    async def submit(self, message: Message) -> None:
        """Put a message on the inbound queue, waiting while it is full."""
        await self.inbound.put(message)
