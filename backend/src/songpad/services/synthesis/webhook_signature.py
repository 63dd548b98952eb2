"""Signature hook for Mureka webhook deliveries.

Mureka does not document a signing scheme, so validation is disabled unless a
shared secret is configured. With MUREKA_WEBHOOK_SECRET set, the X-Mureka-Signature
header must carry the hex HMAC-SHA256 of the raw request body.
"""

import hashlib
import hmac


def validate_mureka_signature(raw_body: bytes, signature: str | None, signing_key: str) -> bool:
    """Validate a Mureka webhook signature.

    Args:
        raw_body: Raw request body bytes, before any JSON parsing
        signature: Value of the X-Mureka-Signature header (may be missing)
        signing_key: Shared webhook secret; empty disables validation

    Returns:
        True if the delivery is accepted, False otherwise
    """
    if not signing_key:
        return True

    if not signature:
        return False

    expected = hmac.new(
        key=signing_key.encode("utf-8"), msg=raw_body, digestmod=hashlib.sha256
    ).hexdigest()

    # Constant-time comparison, hex accepted in either case
    return hmac.compare_digest(
        expected.encode("utf-8"), signature.strip().lower().encode("utf-8")
    )
