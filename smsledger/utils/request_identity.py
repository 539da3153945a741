"""
Request identity - an Argon2id hash over (signature, idempotency token, message SID).

The value joins the audit row to the sms row and lets operators correlate
redeliveries. It sits next to message content, so it is derived with a
memory-hard hash to keep partially observed requests from being enumerated.
The salt and cost parameters are fixed configuration, which makes the output
deterministic for identical inputs.
"""
import asyncio
import logging
from typing import Optional

from argon2.exceptions import HashingError
from argon2.low_level import Type, hash_secret

from smsledger.config import Settings
from smsledger.errors import IdentityDerivationError

logger = logging.getLogger(__name__)

IDENTITY_SEPARATOR = "###"


def _identity_material(
    signature: Optional[str],
    idempotency_token: Optional[str],
    message_sid: Optional[str],
) -> bytes:
    parts = (signature or "", idempotency_token or "", message_sid or "")
    return IDENTITY_SEPARATOR.join(parts).encode("utf-8")


def compute_request_identity(
    signature: Optional[str],
    idempotency_token: Optional[str],
    message_sid: Optional[str],
    *,
    settings: Settings,
) -> str:
    """Blocking Argon2id computation. Returns the encoded hash string."""
    try:
        encoded = hash_secret(
            _identity_material(signature, idempotency_token, message_sid),
            settings.identity_hash_salt.encode("utf-8"),
            time_cost=settings.identity_hash_time_cost,
            memory_cost=settings.identity_hash_memory_cost,
            parallelism=settings.identity_hash_parallelism,
            hash_len=settings.identity_hash_length,
            type=Type.ID,
        )
    except HashingError as e:
        raise IdentityDerivationError(f"Argon2 hashing failed: {e}") from e
    return encoded.decode("ascii")


async def derive_request_identity(
    signature: Optional[str],
    idempotency_token: Optional[str],
    message_sid: Optional[str],
    *,
    settings: Settings,
) -> str:
    """Run compute_request_identity in the thread pool to avoid blocking the event loop."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        lambda: compute_request_identity(
            signature, idempotency_token, message_sid, settings=settings,
        ),
    )
