"""
Webhook signature validation - verify incoming Twilio callbacks are authentic.

Twilio signs each callback with HMAC-SHA1 over the configured webhook URL
followed by the POST parameters sorted by name, keyed by the account auth
token, and sends the base64 digest in X-Twilio-Signature.
"""
import logging
from typing import Mapping, Optional

from twilio.request_validator import RequestValidator

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-twilio-signature"
IDEMPOTENCY_HEADER = "i-twilio-idempotency-token"
PROVIDER_HEADER_FRAGMENT = "twilio"


def has_provider_headers(headers: Mapping[str, str]) -> bool:
    """True if any header name contains 'twilio' (case-insensitive)."""
    return any(PROVIDER_HEADER_FRAGMENT in name.lower() for name in headers.keys())


def validate_twilio_signature(
    auth_token: str,
    signature: Optional[str],
    url: str,
    params: dict,
) -> bool:
    """
    Validate Twilio webhook signature using their RequestValidator.
    Returns True if valid, False if invalid or on error.
    """
    if not signature:
        logger.warning("Missing X-Twilio-Signature header")
        return False

    try:
        validator = RequestValidator(auth_token)
        return bool(validator.validate(url, params, signature))
    except Exception as e:
        logger.error("Twilio signature validation error: %s", str(e))
        return False
