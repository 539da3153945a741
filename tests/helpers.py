"""Shared test helpers - signing, context builders, direct SQLite reads."""
import sqlite3

from twilio.request_validator import RequestValidator

from smsledger.schemas.message_context import InboundMessageContext
from smsledger.schemas.webhook_payloads import TwilioSmsPayload

AUTH_TOKEN = "test_auth_token"
WEBHOOK_ENDPOINT = "https://sms.example.com/twilio/sms"


def sign(params: dict, url: str = WEBHOOK_ENDPOINT, auth_token: str = AUTH_TOKEN) -> str:
    return RequestValidator(auth_token).compute_signature(url, params)


def tamper(signature: str) -> str:
    """Flip the first character of a signature."""
    return ("A" if signature[0] != "A" else "B") + signature[1:]


def make_context(params: dict, **overrides) -> InboundMessageContext:
    fields = {
        "received_on": 1700000000.25,
        "signature": "sig",
        "idempotency_token": "idem-1",
        "request_body": TwilioSmsPayload.model_validate(params),
        "webhook_endpoint": WEBHOOK_ENDPOINT,
        "is_authentic": True,
        "request_uid": "$argon2id$v=19$m=1024,t=1,p=1$c2FsdA$aGFzaA",
    }
    fields.update(overrides)
    return InboundMessageContext(**fields)


def fetch_rows(db_path: str, table: str) -> list[dict]:
    """Read a table straight from the SQLite file, outside the app's engine."""
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    try:
        return [dict(row) for row in conn.execute(f"SELECT * FROM {table}")]
    finally:
        conn.close()
