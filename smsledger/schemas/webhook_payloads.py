"""
Webhook payload schemas - raw form input from Twilio SMS callbacks.
"""
from pydantic import BaseModel, ConfigDict


class TwilioSmsPayload(BaseModel):
    """
    Twilio inbound SMS webhook payload.

    Every consumed field defaults to an empty string so that a malformed
    callback is still recorded instead of rejected before the audit write.
    Fields not listed here are kept as extras.
    """
    model_config = ConfigDict(extra="allow", frozen=True)

    SmsMessageSid: str = ""
    AccountSid: str = ""
    ApiVersion: str = ""
    From: str = ""  # E.164 phone number
    To: str = ""
    Body: str = ""
