"""
Unit Tests for webhook signature verification
"""

import hashlib
import hmac

from app.integrations.github.webhook import compute_signature, verify_webhook_signature

SECRET = "It's a Secret to Everybody"
BODY = b"Hello, World!"


def test_compute_signature_matches_github_example():
    """Test against the example from GitHub's webhook documentation."""
    assert compute_signature(BODY, SECRET) == (
        "sha256=757107ea0eb2509fc211221cce984b8a37570b6d7586c22c46f4379c8b043e17"
    )


def test_verify_valid_signature():
    signature = "sha256=" + hmac.new(SECRET.encode(), BODY, hashlib.sha256).hexdigest()
    assert verify_webhook_signature(BODY, signature, SECRET) is True


def test_verify_rejects_tampered_body():
    signature = compute_signature(BODY, SECRET)
    assert verify_webhook_signature(BODY + b" ", signature, SECRET) is False


def test_verify_rejects_missing_or_malformed_header():
    assert verify_webhook_signature(BODY, None, SECRET) is False
    assert verify_webhook_signature(BODY, "", SECRET) is False
    assert verify_webhook_signature(BODY, "sha1=abc", SECRET) is False


def test_verify_rejects_wrong_secret():
    signature = compute_signature(BODY, "other-secret")
    assert verify_webhook_signature(BODY, signature, SECRET) is False
