"""Remote platform interface.

Each chat backend implements RemotePlatform; the bot runtime depends only
on this interface.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from ..models import Bot, Message, Rule


class RemotePlatform(ABC):
    """
    Bridge between a chat platform and the bot's message model.

    Implementations absorb platform failures with logging: a remote must
    never raise into the rule pipeline.
    """

    name: str = "remote"

    @abstractmethod
    async def read(self, bot: Bot, rules: Mapping[str, Rule]) -> None:
        """
        Ingest platform events onto bot.inbound for the process lifetime.

        Returns early (and stays silent) when authentication fails or no
        transport is configured.
        """

    @abstractmethod
    async def send(self, message: Message, bot: Bot) -> None:
        """Deliver message.output to the platform."""

    @abstractmethod
    async def reaction(self, message: Message, rule: Rule, bot: Bot) -> None:
        """Apply the rule's remove_reaction / reaction to the message."""

    @abstractmethod
    async def interactive_components(
        self, message: Message, rule: Rule, bot: Bot
    ) -> None:
        """Post the rule's interactive UI, starting the callback server if needed."""
