"""
LINE Signature Verification

SECURITY BOUNDARY - Verify the X-Line-Signature HMAC.
No handler imports. No retries. No logic.
"""

import base64
import hashlib
import hmac
from typing import Optional

SIGNATURE_HEADER = "X-Line-Signature"


def compute_signature(body: bytes, channel_secret: str) -> str:
    """Base64 of HMAC-SHA256(channel_secret, body)."""
    digest = hmac.new(
        key=channel_secret.encode("utf-8"),
        msg=body,
        digestmod=hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(
    body: Optional[bytes],
    signature: Optional[str],
    channel_secret: Optional[str],
) -> bool:
    """
    Verify LINE HMAC-SHA256 signature on the exact request body.

    LINE sends:
    - X-Line-Signature header with base64(HMAC-SHA256(channel secret, body))
    - Request body

    Fails closed: any missing input returns False. The body must be the
    untransformed bytes received; never re-serialize before calling this.

    Args:
        body: Raw request body bytes
        signature: Value of the X-Line-Signature header
        channel_secret: LINE channel secret

    Returns:
        True if the signature matches
    """

    if body is None or not signature or not channel_secret:
        return False

    expected = compute_signature(body, channel_secret)

    # Compare (constant-time to prevent timing attacks)
    return hmac.compare_digest(
        signature.encode("utf-8"),
        expected.encode("utf-8"),
    )
