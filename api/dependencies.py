"""Dependency injection for FastAPI."""

from fastapi import HTTPException, Request
from loguru import logger
from slack_sdk.signature import SignatureVerifier


class SlackSignature:
    """Dependency that returns the raw request body once Slack's signature checks out.

    Rejects with 401 when the X-Slack-Signature / X-Slack-Request-Timestamp
    headers are missing, stale or do not match the signing secret.
    """

    def __init__(self, signing_secret: str):
        self.verifier = SignatureVerifier(signing_secret)

    async def __call__(self, request: Request) -> bytes:
        body = await request.body()
        if not self.verifier.is_valid_request(body, dict(request.headers)):
            logger.warning(f"rejected request to '{request.url.path}': invalid slack signature")
            raise HTTPException(status_code=401, detail="invalid request signature")
        return body
