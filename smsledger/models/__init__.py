"""
Database tables - import all tables here so create_all can discover them.
"""
from smsledger.models.twilio_message import twilio_messages
from smsledger.models.sms import sms

__all__ = [
    "twilio_messages",
    "sms",
]
