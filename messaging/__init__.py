"""Platform-agnostic messaging layer."""

from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    RemoteError,
    TransientRemoteError,
)
from .models import Action, Bot, Message, MessageType, Rule
from .platforms import RemotePlatform, create_remote_platform

__all__ = [
    "Action",
    "AuthenticationError",
    "Bot",
    "ConfigurationError",
    "Message",
    "MessageType",
    "RemoteError",
    "RemotePlatform",
    "Rule",
    "TransientRemoteError",
    "create_remote_platform",
]
