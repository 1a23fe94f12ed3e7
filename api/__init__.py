"""HTTP surface for Slack callbacks."""

from .app import create_events_app, create_interactions_app
from .interactions import InteractionServer

__all__ = ["InteractionServer", "create_events_app", "create_interactions_app"]
