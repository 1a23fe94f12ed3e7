"""Remote platform adapters (Slack)."""

from .base import RemotePlatform
from .factory import create_remote_platform

__all__ = ["RemotePlatform", "create_remote_platform"]
