"""
Normalized inbound SMS - joined to twilio_messages through hash_id and received_on.
"""
from sqlalchemy import Column, Float, Table, Text

from smsledger.database import Base

sms = Table(
    "sms",
    Base.metadata,
    Column("hash_id", Text, nullable=False),
    Column("sender", Text, nullable=False),
    Column("receiver", Text, nullable=False),
    Column("body", Text, nullable=False),
    Column("received_on", Float, nullable=False),
)
