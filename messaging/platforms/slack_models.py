"""Pydantic models for Slack interactive-component payloads."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class SlackUser(BaseModel):
    id: str
    username: str = ""
    name: str = ""

    model_config = ConfigDict(extra="ignore")

    @property
    def display_name(self) -> str:
        return self.username or self.name or self.id


class SlackChannel(BaseModel):
    id: str
    name: str = ""

    model_config = ConfigDict(extra="ignore")


class SlackAction(BaseModel):
    action_id: str = ""
    block_id: str = ""
    # Legacy attachment actions use name instead of action_id
    name: str = ""
    type: str = ""
    value: str = ""
    selected_option: dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")

    @property
    def effective_id(self) -> str:
        return self.action_id or self.name

    @property
    def effective_value(self) -> str:
        if self.value:
            return self.value
        if self.selected_option:
            return str(self.selected_option.get("value", ""))
        return ""


class InteractionPayload(BaseModel):
    """
    Body of a block_actions / interactive_message callback.

    Slack sends it form-encoded as the `payload` field (HTTP) or as the
    envelope payload (socket mode).
    """

    type: str
    user: SlackUser
    channel: SlackChannel | None = None
    actions: list[SlackAction] = []
    callback_id: str = ""
    message_ts: str = ""
    message: dict[str, Any] | None = None
    container: dict[str, Any] | None = None
    response_url: str = ""
    trigger_id: str = ""

    model_config = ConfigDict(extra="ignore")

    @property
    def message_timestamp(self) -> str:
        """Timestamp of the message holding the interactive component."""
        if self.container and self.container.get("message_ts"):
            return str(self.container["message_ts"])
        if self.message and self.message.get("ts"):
            return str(self.message["ts"])
        return self.message_ts

    @property
    def thread_timestamp(self) -> str | None:
        if self.message and self.message.get("thread_ts"):
            return str(self.message["thread_ts"])
        return None
