"""Remote platform factory.

Builds the configured remote from settings. The interaction server is
created here once and owned by the returned platform.
"""

from loguru import logger

from config.settings import Settings

from ..exceptions import ConfigurationError
from ..models import Bot
from ..rate_limit import SlackRateLimiter
from .base import RemotePlatform


def transport_name(settings: Settings) -> str:
    """Name the inbound transport the remote will use."""
    if settings.socket_mode_enabled:
        return "socket mode"
    if settings.events_api_enabled:
        return "events API"
    return "none"


def create_remote_platform(
    settings: Settings,
    bot: Bot,
    on_interaction=None,
) -> RemotePlatform:
    """
    Create the remote for the given settings.

    Args:
        settings: Loaded bot settings
        bot: Bot context the remote will feed
        on_interaction: Optional coroutine run for each interaction callback

    Raises:
        ConfigurationError: if no platform token is configured
    """
    if not settings.slack_token:
        raise ConfigurationError("'slack_token' is not set - cannot create slack remote")

    from api.interactions import InteractionServer

    from .slack import SlackPlatform

    interaction_server = None
    if settings.interactive_components:
        interaction_server = InteractionServer(
            bot,
            settings.slack_signing_secret,
            settings.slack_interactions_callback_path,
            port=settings.interactions_port,
            on_interaction=on_interaction,
        )

    platform = SlackPlatform(
        token=settings.slack_token,
        app_token=settings.slack_app_token,
        signing_secret=settings.slack_signing_secret,
        events_callback_path=settings.slack_events_callback_path,
        listener_port=settings.slack_listener_port,
        interaction_server=interaction_server,
        rate_limiter=SlackRateLimiter(
            settings.slack_rate_limit, settings.slack_rate_window
        ),
        debug=settings.debug,
    )
    transport = transport_name(settings)
    if transport == "none" and not settings.cli:
        logger.warning(
            "neither 'slack_app_token' nor 'slack_signing_secret' is set - "
            "the slack remote will not read messages"
        )
    logger.info(f"Remote initialized: {platform.name} (transport: {transport})")
    return platform
