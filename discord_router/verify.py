"""Discord request signature verification."""
from typing import Optional

from nacl.signing import VerifyKey
from nacl.exceptions import BadSignatureError

from .observability import init_observability

logger, _ = init_observability('discord-router-verify')


def verify_signature(body: str, signature: Optional[str], timestamp: Optional[str], public_key: str) -> bool:
    """Verify the Ed25519 signature Discord puts on every interaction request.

    Args:
        body: Raw request body exactly as received
        signature: Value of the X-Signature-Ed25519 header
        timestamp: Value of the X-Signature-Timestamp header
        public_key: Application public key (hex)

    Returns:
        True if the signature is valid, False otherwise
    """
    if not signature or not timestamp:
        logger.warning("Missing Discord signature headers")
        return False

    try:
        verify_key = VerifyKey(bytes.fromhex(public_key))
        message = timestamp.encode() + body.encode()
        verify_key.verify(message, bytes.fromhex(signature))
        return True
    except (BadSignatureError, ValueError) as e:
        logger.warning("Signature verification failed", error=e)
        return False
