"""
Slack Platform Adapter

Implements RemotePlatform for Slack using slack_sdk. Events arrive over
socket mode (app-level token) or the Events API (signing secret); both feed
the bot's inbound queue in delivery order.
"""

import asyncio
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from loguru import logger
from slack_sdk.errors import SlackApiError
from slack_sdk.socket_mode.aiohttp import SocketModeClient
from slack_sdk.socket_mode.request import SocketModeRequest
from slack_sdk.socket_mode.response import SocketModeResponse
from slack_sdk.web.async_client import AsyncWebClient

from ..exceptions import AuthenticationError, ConfigurationError, TransientRemoteError
from ..models import SENDABLE_TYPES, Bot, Message, Rule, message_timestamp
from ..rate_limit import SlackRateLimiter
from .base import RemotePlatform
from .slack_mapper import event_to_message, interaction_to_message, is_valid_path
from .slack_models import InteractionPayload

if TYPE_CHECKING:
    from api.interactions import InteractionServer

# Slack's hard limit on message text
SLACK_MESSAGE_LIMIT = 4000


def truncate_output(text: str, limit: int = SLACK_MESSAGE_LIMIT) -> str:
    """Cut text to exactly limit characters, ending in '...', if it is longer."""
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _api_error_text(e: SlackApiError) -> str:
    try:
        return str(e.response["error"])
    except (KeyError, TypeError):
        return str(e)


class SlackPlatform(RemotePlatform):
    """
    Slack remote.

    Holds a single AsyncWebClient for all Web API calls; outbound writes go
    through a SlackRateLimiter.
    """

    name = "slack"

    def __init__(
        self,
        token: str,
        app_token: str | None = None,
        signing_secret: str | None = None,
        *,
        events_callback_path: str = "/slack_events/v1/events",
        listener_port: int = 3000,
        interaction_server: "InteractionServer | None" = None,
        rate_limiter: SlackRateLimiter | None = None,
        client: AsyncWebClient | None = None,
        debug: bool = False,
    ):
        self.token = token
        self.app_token = app_token
        self.signing_secret = signing_secret
        self.events_callback_path = events_callback_path
        self.listener_port = listener_port
        self.interaction_server = interaction_server
        self.rate_limiter = rate_limiter or SlackRateLimiter()
        self.client = client or AsyncWebClient(token=token)
        self.debug = debug

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def read(self, bot: Bot, rules: Mapping[str, Rule]) -> None:
        try:
            identity = await self._authenticate()
        except AuthenticationError as e:
            logger.error(f"{e} - closing slack message reader")
            return

        bot.id = identity.get("user_id", "")
        bot.name = identity.get("user") or bot.name
        bot.rooms = await self._get_rooms()
        logger.info(
            f"slack reader authenticated as '{bot.name}' ({bot.id}), "
            f"{len(bot.rooms)} rooms, {len(rules)} rules"
        )

        if self.app_token:
            await self._read_from_socket_mode(bot)
        elif self.signing_secret:
            await self._read_from_events_api(bot)
        elif not bot.cli:
            logger.error(
                "cli mode is disabled and tokens are not set up correctly to run the bot"
            )

    async def _authenticate(self) -> Any:
        try:
            response = await self.client.auth_test()
        except SlackApiError as e:
            raise AuthenticationError(
                f"the slack token that was provided was invalid or is unauthorized "
                f"({_api_error_text(e)})"
            ) from e
        return response

    async def _get_rooms(self) -> dict[str, str]:
        """Map channel names the bot can see to their ids."""
        rooms: dict[str, str] = {}
        cursor = None
        try:
            while True:
                response = await self.client.conversations_list(
                    types="public_channel,private_channel",
                    exclude_archived=True,
                    limit=200,
                    cursor=cursor,
                )
                for channel in response.get("channels", []):
                    rooms[channel["name"]] = channel["id"]
                cursor = (response.get("response_metadata") or {}).get("next_cursor")
                if not cursor:
                    break
        except SlackApiError as e:
            logger.warning(f"could not list slack rooms: {_api_error_text(e)}")
        return rooms

    async def _read_from_socket_mode(self, bot: Bot) -> None:
        socket_client = SocketModeClient(
            app_token=self.app_token,
            web_client=self.client,
            trace_enabled=self.debug,
        )
        socket_client.socket_mode_request_listeners.append(self._socket_listener(bot))
        await socket_client.connect()
        logger.info("slack socket mode connected")
        try:
            await asyncio.Event().wait()
        finally:
            await socket_client.close()

    def _socket_listener(self, bot: Bot):
        """Listener for socket mode envelopes.

        slack_sdk runs each envelope's listeners as a separate task, so the
        message is queued before the ack is awaited. Queueing does not yield
        on a non-full queue, which keeps arrival order.
        """

        async def process(client: SocketModeClient, req: SocketModeRequest) -> None:
            await self._handle_socket_request(req, bot)
            await client.send_socket_mode_response(
                SocketModeResponse(envelope_id=req.envelope_id)
            )

        return process

    async def _handle_socket_request(self, req: SocketModeRequest, bot: Bot) -> None:
        if req.type == "events_api":
            await self.dispatch_event(req.payload.get("event") or {}, bot)
        elif req.type == "interactive":
            try:
                payload = InteractionPayload.model_validate(req.payload)
                message = interaction_to_message(payload, bot)
            except ValueError as e:
                logger.warning(f"ignoring malformed interaction payload: {e}")
                return
            await bot.submit(message)
        else:
            logger.debug(f"ignoring socket mode request of type '{req.type}'")

    async def _read_from_events_api(self, bot: Bot) -> None:
        from api.app import create_events_app
        from api.server import build_server, listen

        if not is_valid_path(self.events_callback_path):
            logger.error(
                f"invalid events path '{self.events_callback_path}' - please double "
                'check your path value/syntax (e.g. "/slack_events/v1/mybot_dev-v1_events")'
            )
            return

        try:
            sock = listen(self.listener_port)
        except ConfigurationError as e:
            logger.error(f"{e} - closing slack events reader")
            return

        async def on_event(event: dict[str, Any]) -> None:
            await self.dispatch_event(event, bot)

        app = create_events_app(
            self.events_callback_path, self.signing_secret, on_event=on_event
        )
        logger.info(
            f"slack events API server is listening to '{self.events_callback_path}' "
            f"on port {self.listener_port}"
        )
        await build_server(app, self.listener_port).serve(sockets=[sock])

    async def dispatch_event(self, event: dict[str, Any], bot: Bot) -> None:
        """Translate one Slack event and put it on the inbound queue."""
        message = event_to_message(event, bot)
        if message is None:
            return
        logger.debug(
            f"received slack message '{message.id}' in '{message.channel_id}'"
        )
        await bot.submit(message)

    # ------------------------------------------------------------------
    # Send
    # ------------------------------------------------------------------

    async def send(self, message: Message, bot: Bot) -> None:
        logger.debug(f"sending message '{message.id}'")

        message.output = truncate_output(message.output)
        message.end_time = message_timestamp()

        if message.type not in SENDABLE_TYPES:
            logger.warning("received unknown message type - no message to send")
            return

        with logger.contextualize(message_id=message.id, channel_id=message.channel_id):
            await self._send(message, bot)

    async def _send(self, message: Message, bot: Bot) -> None:
        text = message.output
        user_id = message.user_id

        if message.direct_message_only and user_id:
            await self._send_direct(user_id, text)
        elif message.is_ephemeral and user_id:
            await self._post(
                "chat_postEphemeral",
                channel=message.channel_id,
                user=user_id,
                text=text,
            )
        else:
            await self._post(
                "chat_postMessage",
                channel=message.channel_id,
                text=text,
                thread_ts=message.thread_timestamp,
            )

        for room in message.output_to_rooms:
            room_id = bot.rooms.get(room.lstrip("#"))
            if room_id is None:
                logger.warning(f"bot is not in room '{room}' - not sending message there")
                continue
            await self._post("chat_postMessage", channel=room_id, text=text)

        for user in message.output_to_users:
            await self._send_direct(user, text)

    async def _send_direct(self, user_id: str, text: str) -> None:
        try:
            response = await self._call("conversations_open", users=user_id)
        except TransientRemoteError as e:
            logger.error(f"could not open direct message with '{user_id}': {e}")
            return
        channel_id = response["channel"]["id"]
        await self._post("chat_postMessage", channel=channel_id, text=text)

    async def _post(self, method: str, **kwargs: Any) -> None:
        try:
            await self._call(method, **kwargs)
        except TransientRemoteError as e:
            logger.error(f"could not send message: {e}")

    async def _call(self, method: str, **kwargs: Any) -> Any:
        """Call a Web API write method through the rate limiter.

        Raises:
            TransientRemoteError: wrapping the SlackApiError
        """
        await self.rate_limiter.wait_if_blocked()
        try:
            return await getattr(self.client, method)(**kwargs)
        except SlackApiError as e:
            if getattr(e.response, "status_code", None) == 429:
                headers = getattr(e.response, "headers", None) or {}
                self.rate_limiter.set_blocked(float(headers.get("Retry-After", 1)))
            raise TransientRemoteError(
                f"{method} failed: {_api_error_text(e)}", operation=method
            ) from e

    # ------------------------------------------------------------------
    # Reactions
    # ------------------------------------------------------------------

    async def reaction(self, message: Message, rule: Rule, bot: Bot) -> None:
        if rule.remove_reaction:
            try:
                await self._call(
                    "reactions_remove",
                    name=rule.remove_reaction,
                    channel=message.channel_id,
                    timestamp=message.timestamp,
                )
            except TransientRemoteError as e:
                logger.error(f"could not remove reaction: {e}")
            else:
                logger.info(
                    f"removed reaction '{rule.remove_reaction}' for rule '{rule.name}'"
                )

        if rule.reaction:
            try:
                await self._call(
                    "reactions_add",
                    name=rule.reaction,
                    channel=message.channel_id,
                    timestamp=message.timestamp,
                )
            except TransientRemoteError as e:
                logger.error(f"could not add reaction: {e}")
            else:
                logger.info(f"added reaction '{rule.reaction}' for rule '{rule.name}'")

    # ------------------------------------------------------------------
    # Interactive components
    # ------------------------------------------------------------------

    async def interactive_components(
        self, message: Message, rule: Rule, bot: Bot
    ) -> None:
        if not (bot.interactive_components and self.signing_secret):
            return
        if self.interaction_server is None:
            logger.warning("interactive components enabled but no interaction server was set up")
            return
        if not await self.interaction_server.activate():
            return

        await self._process_interactive_rule(message, rule)

    async def _process_interactive_rule(self, message: Message, rule: Rule) -> None:
        if not rule.blocks:
            logger.warning(f"rule '{rule.name}' has no interactive blocks to send")
            return
        await self._post(
            "chat_postMessage",
            channel=message.channel_id,
            text=truncate_output(message.output or rule.name),
            blocks=rule.blocks,
            thread_ts=message.thread_timestamp,
        )
