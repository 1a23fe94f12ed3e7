"""Interactive components server.

Constructed once at startup and handed to the remote that needs it.
The HTTP server starts on the first activate() call; later calls reuse it.
"""

import asyncio

from fastapi import FastAPI
from loguru import logger

from messaging.exceptions import ConfigurationError
from messaging.models import Bot
from messaging.platforms.slack_mapper import is_valid_path

from .app import InteractionHandler, create_interactions_app
from .server import build_server, listen


class InteractionServer:
    """
    Owner of the interactions app and its uvicorn task.

    Inert unless the bot has interactive components enabled and a signing
    secret is configured. An invalid callback path disables it for good.
    """

    def __init__(
        self,
        bot: Bot,
        signing_secret: str | None,
        callback_path: str | None,
        *,
        port: int = 4000,
        host: str = "0.0.0.0",
        on_interaction: InteractionHandler | None = None,
    ):
        self.bot = bot
        self.signing_secret = signing_secret
        self.callback_path = callback_path
        self.port = port
        self.host = host
        self.on_interaction = on_interaction

        self.app: FastAPI | None = None
        self._server = None
        self._task: asyncio.Task | None = None
        self._disabled = False
        self._lock = asyncio.Lock()

    @property
    def enabled(self) -> bool:
        return bool(self.bot.interactive_components and self.signing_secret)

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def _validate(self) -> None:
        if not self.callback_path:
            raise ConfigurationError(
                "need to specify a callback path for 'slack_interactions_callback_path' "
                '(e.g. "/slack_events/v1/mybot_dev-v1_interactions")'
            )
        if not is_valid_path(self.callback_path):
            raise ConfigurationError(
                f"invalid interactions path '{self.callback_path}' - please double check "
                'your path value/syntax (e.g. "/slack_events/v1/mybot_dev-v1_interactions")'
            )

    async def activate(self) -> bool:
        """Start the server once.

        A server whose task has died is not restarted; activate() reports
        False for it.

        Returns:
            True if the server is running, False if it is inert, disabled
            or stopped
        """
        if not self.enabled:
            return False

        async with self._lock:
            if self._disabled:
                return False
            if self._task is not None:
                return self.is_running

            try:
                self._validate()
                sock = listen(self.port, self.host)
            except ConfigurationError as e:
                logger.error(str(e))
                logger.warning(
                    "closing interactions reader (will not be able to read interactive components)"
                )
                self._disabled = True
                return False

            self.app = create_interactions_app(
                self.callback_path,
                self.signing_secret,
                self.bot,
                on_interaction=self.on_interaction,
            )
            self._server = build_server(self.app, self.port, self.host)
            self._task = asyncio.create_task(
                self._server.serve(sockets=[sock]), name="slack-interactions-server"
            )
            logger.info(
                f"slack interactive components server is listening to "
                f"'{self.callback_path}' on port {self.port}"
            )
            return True

    async def shutdown(self) -> None:
        if self._task is None:
            return
        self._server.should_exit = True
        await self._task
        self._task = None
        logger.debug("slack interactive components server stopped")
