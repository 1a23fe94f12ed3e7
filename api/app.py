"""FastAPI application factories for Slack callbacks.

Two independent apps: the Events API receiver (callback-mode ingestion)
and the interactive-components receiver. Both verify Slack's request
signature before touching the body.
"""

import json
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import parse_qs

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Response
from loguru import logger
from pydantic import ValidationError

from messaging.models import Bot, Message
from messaging.platforms.slack_mapper import interaction_to_message
from messaging.platforms.slack_models import InteractionPayload

from .dependencies import SlackSignature

EventHandler = Callable[[dict[str, Any]], Awaitable[None]]
InteractionHandler = Callable[[Message], Awaitable[None]]


def _parse_json(body: bytes) -> dict[str, Any]:
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise HTTPException(status_code=400, detail="body is not valid JSON") from e
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="body must be a JSON object")
    return data


def create_events_app(
    callback_path: str,
    signing_secret: str,
    on_event: EventHandler,
) -> FastAPI:
    """Events API app: GET /event_health and POST <callback_path>."""
    verify = SlackSignature(signing_secret)
    router = APIRouter()

    @router.get("/event_health")
    async def event_health() -> dict[str, str]:
        return {"status": "ok"}

    @router.post(callback_path, response_model=None)
    async def slack_event(body: bytes = Depends(verify)) -> Response | dict[str, str]:
        payload = _parse_json(body)
        payload_type = payload.get("type")

        if payload_type == "url_verification":
            return {"challenge": payload.get("challenge", "")}

        if payload_type == "event_callback":
            event = payload.get("event") or {}
            await on_event(event)
        else:
            logger.debug(f"ignoring events API payload of type '{payload_type}'")
        return Response(status_code=200)

    app = FastAPI(title="slack-events")
    app.include_router(router)
    return app


def decode_interaction(body: bytes) -> InteractionPayload:
    """Decode the form-encoded `payload` field of an interaction callback.

    Raises:
        HTTPException: 400 if the payload is missing or malformed
    """
    form = parse_qs(body.decode("utf-8", errors="replace"))
    raw = form.get("payload")
    if not raw:
        raise HTTPException(status_code=400, detail="missing payload")
    try:
        return InteractionPayload.model_validate_json(raw[0])
    except ValidationError as e:
        raise HTTPException(status_code=400, detail="malformed payload") from e


def create_interactions_app(
    callback_path: str,
    signing_secret: str,
    bot: Bot,
    on_interaction: InteractionHandler | None = None,
) -> FastAPI:
    """Interactive components app: GET /interaction_health and POST <callback_path>.

    A verified interaction is put on the bot's inbound queue like any other
    message, then on_interaction (if set) handles that single message
    before the response is sent.
    """
    verify = SlackSignature(signing_secret)
    router = APIRouter()

    @router.get("/interaction_health")
    async def interaction_health() -> dict[str, str]:
        return {"status": "ok"}

    @router.post(callback_path)
    async def slack_interaction(body: bytes = Depends(verify)) -> Response:
        payload = decode_interaction(body)
        try:
            message = interaction_to_message(payload, bot)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e)) from e

        with logger.contextualize(message_id=message.id, channel_id=message.channel_id):
            logger.info(
                f"received interaction '{payload.type}' from '{payload.user.id}'"
            )
            await bot.submit(message)
            if on_interaction is not None:
                await on_interaction(message)
        return Response(status_code=200)

    app = FastAPI(title="slack-interactions")
    app.include_router(router)
    return app
