import time

import pytest
from slack_sdk.signature import SignatureVerifier

SIGNING_SECRET = "test-signing-secret"


@pytest.fixture
def signing_secret():
    return SIGNING_SECRET


@pytest.fixture
def sign():
    """Build the headers Slack would send for a body signed with a secret."""

    def _sign(body: bytes, content_type: str, secret: str = SIGNING_SECRET) -> dict:
        timestamp = str(int(time.time()))
        signature = SignatureVerifier(secret).generate_signature(
            timestamp=timestamp, body=body
        )
        return {
            "Content-Type": content_type,
            "X-Slack-Request-Timestamp": timestamp,
            "X-Slack-Signature": signature,
        }

    return _sign
