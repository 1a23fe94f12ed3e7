"""Map Slack events and interaction payloads to Message."""

import re
import uuid
from typing import Any

from ..models import Bot, Message, MessageType
from .slack_models import InteractionPayload

# Absolute path made of [A-Za-z0-9_.-] segments,
# e.g. /slack_events/v1/mybot_dev-v1_interactions
_CALLBACK_PATH = re.compile(r"^/([A-Za-z0-9_.\-]+/?)+$")

_MENTION = re.compile(r"<@([A-Z0-9]+)(?:\|[^>]*)?>[ \t]*")

# Edits, deletions, joins and other bots are not user input
IGNORED_SUBTYPES = frozenset(
    {
        "bot_message",
        "channel_join",
        "channel_leave",
        "message_changed",
        "message_deleted",
        "message_replied",
    }
)


def is_valid_path(path: str | None) -> bool:
    return bool(path) and _CALLBACK_PATH.match(path) is not None


def message_type_for_channel(channel_id: str) -> MessageType:
    """Classify a conversation by its Slack id prefix."""
    if channel_id.startswith("D"):
        return MessageType.direct
    if channel_id.startswith("C"):
        return MessageType.channel
    if channel_id.startswith("G"):
        return MessageType.private_channel
    return MessageType.unknown


def strip_bot_mention(text: str, bot_id: str) -> tuple[str, bool]:
    """Remove mentions of the bot (and the spaces after them) from text.

    Other mentions and the rest of the whitespace, newlines included,
    are kept as typed.

    Returns:
        Tuple of (text without the bot's mentions, whether it was mentioned)
    """
    if not bot_id:
        return text.strip(), False
    mentioned = False

    def _replace(m: re.Match) -> str:
        nonlocal mentioned
        if m.group(1) == bot_id:
            mentioned = True
            return ""
        return m.group(0)

    return _MENTION.sub(_replace, text).strip(), mentioned


def _channel_name(channel_id: str, bot: Bot) -> str:
    for name, room_id in bot.rooms.items():
        if room_id == channel_id:
            return name
    return ""


def should_ignore_event(event: dict[str, Any], bot: Bot) -> bool:
    if event.get("type") != "message":
        return True
    if event.get("subtype") in IGNORED_SUBTYPES or event.get("bot_id"):
        return True
    user = event.get("user")
    return not user or user == bot.id


def event_to_message(event: dict[str, Any], bot: Bot) -> Message | None:
    """Translate a Slack `message` event, or None if it is not user input."""
    if should_ignore_event(event, bot):
        return None

    channel_id = event.get("channel", "")
    raw_text = event.get("text", "") or ""
    text, mentioned = strip_bot_mention(raw_text, bot.id)
    msg_type = message_type_for_channel(channel_id)
    channel_name = _channel_name(channel_id, bot)
    user_id = event["user"]
    profile = event.get("user_profile") or {}
    thread_ts = event.get("thread_ts")

    return Message(
        id=uuid.uuid4().hex,
        type=msg_type,
        channel_id=channel_id,
        channel_name=channel_name,
        timestamp=event.get("ts", ""),
        thread_timestamp=thread_ts,
        input=text,
        bot_mentioned=mentioned or msg_type == MessageType.direct,
        vars={
            "_user.id": user_id,
            "_user.name": profile.get("name") or profile.get("display_name") or user_id,
            "_channel.id": channel_id,
            "_channel.name": channel_name,
            "_raw_user_input": raw_text,
            "_thread_ts": thread_ts or "",
        },
        attributes={"source": "slack"},
    )


def interaction_to_message(payload: InteractionPayload, bot: Bot) -> Message:
    """Translate an interactive-component callback.

    Raises:
        ValueError: if the payload carries no channel to answer in
    """
    if payload.channel is None:
        raise ValueError(f"interaction payload of type '{payload.type}' has no channel")

    channel_id = payload.channel.id
    action = payload.actions[0] if payload.actions else None
    value = action.effective_value if action else ""
    channel_name = payload.channel.name or _channel_name(channel_id, bot)

    return Message(
        id=uuid.uuid4().hex,
        type=message_type_for_channel(channel_id),
        channel_id=channel_id,
        channel_name=channel_name,
        timestamp=payload.message_timestamp,
        thread_timestamp=payload.thread_timestamp,
        input=value,
        bot_mentioned=True,
        vars={
            "_user.id": payload.user.id,
            "_user.name": payload.user.display_name,
            "_channel.id": channel_id,
            "_channel.name": channel_name,
            "_raw_user_input": value,
            "_action.id": action.effective_id if action else "",
            "_action.value": value,
            "_callback_id": payload.callback_id,
        },
        attributes={"source": "slack", "interaction_type": payload.type},
    )
