"""
Audit + record writer.

Each inbound callback becomes one twilio_messages row and one sms row,
inserted in a single transaction: both land or neither does.
"""
import logging

from pydantic_core import PydanticSerializationError
from sqlalchemy import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from smsledger.errors import StorageWriteError
from smsledger.models import sms, twilio_messages
from smsledger.schemas.message_context import InboundMessageContext

logger = logging.getLogger(__name__)


def authenticity_flag(is_authentic: bool) -> int:
    """Stored form of the verifier verdict: 1 for authentic, 0 otherwise."""
    return 1 if is_authentic else 0


def _audit_row(context: InboundMessageContext) -> dict:
    body = context.request_body
    return {
        "received_on": context.received_on,
        "twilio_signature": context.signature,
        "twilio_idempotency_token": context.idempotency_token,
        "twilio_sms_message_sid": body.SmsMessageSid,
        "twilio_account_sid": body.AccountSid,
        "twilio_api_version": body.ApiVersion,
        "webhook_endpoint": context.webhook_endpoint,
        "is_authentic_request": authenticity_flag(context.is_authentic),
        "raw_request": context.model_dump_json(),
    }


def _sms_row(context: InboundMessageContext) -> dict:
    body = context.request_body
    return {
        "hash_id": context.request_uid,
        "sender": body.From,
        "receiver": body.To,
        "body": body.Body,
        "received_on": context.received_on,
    }


async def record_inbound_message(db: AsyncSession, context: InboundMessageContext) -> None:
    """
    Insert the audit row and the sms row atomically.
    Raises StorageWriteError if the snapshot cannot be serialized or the
    transaction does not commit; nothing is persisted in either case.
    """
    try:
        audit_row = _audit_row(context)
    except PydanticSerializationError as e:
        raise StorageWriteError(f"Could not serialize raw request: {e}") from e

    try:
        async with db.begin():
            await db.execute(insert(twilio_messages).values(**audit_row))
            await db.execute(insert(sms).values(**_sms_row(context)))
    except SQLAlchemyError as e:
        logger.debug("Message store transaction rolled back: %s", str(e))
        raise StorageWriteError(f"Could not record inbound message: {e}") from e
