"""
GitHub webhook signature verification (X-Hub-Signature-256).
"""

import hashlib
import hmac
import logging
from typing import Optional

logger = logging.getLogger(__name__)

SIGNATURE_PREFIX = "sha256="


def compute_signature(payload: bytes, secret: str) -> str:
    """Return the ``sha256=<hex>`` signature GitHub would send for ``payload``."""
    mac = hmac.new(secret.encode("utf-8"), msg=payload, digestmod=hashlib.sha256)
    return f"{SIGNATURE_PREFIX}{mac.hexdigest()}"


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Check a webhook body against its X-Hub-Signature-256 header.

    Args:
        payload: Raw request body, exactly as received
        signature: Header value ("sha256=<hex>") or None
        secret: Shared webhook secret

    Returns:
        True if the signature matches (constant-time comparison)
    """
    if not signature or not signature.startswith(SIGNATURE_PREFIX):
        logger.warning("Missing or malformed webhook signature header")
        return False

    expected = compute_signature(payload, secret)
    return hmac.compare_digest(expected, signature)
