"""
Request signature verification for chat platform interactions.
"""
import logging
from fastapi import HTTPException, Request, status
from nacl.exceptions import BadSignatureError
from nacl.signing import VerifyKey

from expensebot.core.config import settings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Signature-Ed25519"
TIMESTAMP_HEADER = "X-Signature-Timestamp"


def verify_signature(public_key: str, signature: str, timestamp: str, body: bytes) -> bool:
    """Check an Ed25519 signature over timestamp + raw body. All keys are hex."""
    try:
        verify_key = VerifyKey(bytes.fromhex(public_key))
        verify_key.verify(timestamp.encode() + body, bytes.fromhex(signature))
    except (BadSignatureError, ValueError):
        return False
    return True


async def verify_interaction(request: Request) -> None:
    """Dependency rejecting interactions that were not signed by the platform."""
    signature = request.headers.get(SIGNATURE_HEADER)
    timestamp = request.headers.get(TIMESTAMP_HEADER)

    if not settings.DISCORD_PUBLIC_KEY:
        logger.error("DISCORD_PUBLIC_KEY is not set; rejecting interaction")
    elif signature and timestamp and verify_signature(
        settings.DISCORD_PUBLIC_KEY, signature, timestamp, await request.body()
    ):
        return
    else:
        logger.warning("Rejected interaction with invalid request signature")

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid request signature"
    )
