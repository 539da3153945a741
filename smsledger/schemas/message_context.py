"""
Per-request ingestion context, built once every input is known.
"""
from pydantic import BaseModel, ConfigDict

from smsledger.schemas.webhook_payloads import TwilioSmsPayload


class InboundMessageContext(BaseModel):
    """Everything known about one Twilio callback. Its JSON dump is the forensic snapshot."""
    model_config = ConfigDict(frozen=True)

    received_on: float  # epoch seconds, stamped on arrival
    signature: str
    idempotency_token: str
    request_body: TwilioSmsPayload
    webhook_endpoint: str
    is_authentic: bool
    request_uid: str
