"""
Twilio request audit trail - one row per inbound callback, authentic or not.

The table deliberately has no primary key or unique constraint: a captured
and replayed request must land as its own row so replays stay visible.
"""
from sqlalchemy import Column, Float, Integer, Table, Text

from smsledger.database import Base

twilio_messages = Table(
    "twilio_messages",
    Base.metadata,
    Column("received_on", Float, nullable=False),
    Column("twilio_signature", Text, nullable=False),
    Column("twilio_idempotency_token", Text, nullable=False),
    Column("twilio_sms_message_sid", Text, nullable=False),
    Column("twilio_account_sid", Text, nullable=False),
    Column("twilio_api_version", Text, nullable=False),
    Column("webhook_endpoint", Text, nullable=False),
    Column("is_authentic_request", Integer, nullable=False),
    Column("raw_request", Text, nullable=False),
)
