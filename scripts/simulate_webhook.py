"""
Simulate an inbound Twilio SMS callback against a running instance.

Usage:
    python scripts/simulate_webhook.py --auth-token "$TWILIO_AUTH_TOKEN" --url https://sms.example.com/twilio/sms
    python scripts/simulate_webhook.py --mode tampered
    python scripts/simulate_webhook.py --mode unsigned --target http://localhost:8000/
"""
import argparse
import asyncio
import logging
import uuid

import httpx
from twilio.request_validator import RequestValidator

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

TARGET_URL = "http://localhost:8000/"


def build_payload(sender: str, receiver: str, body: str) -> dict:
    """Form fields Twilio sends for an inbound SMS."""
    sid = "SM" + uuid.uuid4().hex
    return {
        "SmsMessageSid": sid,
        "MessageSid": sid,
        "AccountSid": "AC" + uuid.uuid4().hex,
        "ApiVersion": "2010-04-01",
        "From": sender,
        "To": receiver,
        "Body": body,
        "NumMedia": "0",
    }


def build_headers(mode: str, auth_token: str, url: str, payload: dict) -> dict:
    headers = {"Content-Type": "application/x-www-form-urlencoded"}
    if mode == "unsigned":
        return headers

    signature = RequestValidator(auth_token).compute_signature(url, payload)
    if mode == "tampered":
        signature = ("A" if signature[0] != "A" else "B") + signature[1:]
    headers["X-Twilio-Signature"] = signature
    headers["I-Twilio-Idempotency-Token"] = str(uuid.uuid4())
    return headers


async def send(target: str, headers: dict, payload: dict) -> httpx.Response:
    async with httpx.AsyncClient(timeout=30) as client:
        resp = await client.post(target, data=payload, headers=headers)
        logger.info("Webhook response: %s %s", resp.status_code, resp.text)
        return resp


async def main():
    parser = argparse.ArgumentParser(description="Simulate a Twilio SMS webhook")
    parser.add_argument("--mode", default="signed", choices=["signed", "tampered", "unsigned"])
    parser.add_argument("--target", default=TARGET_URL, help="Where to send the request")
    parser.add_argument("--url", default=TARGET_URL, help="WEBHOOK_ENDPOINT the server signs against")
    parser.add_argument("--auth-token", default="test_auth_token")
    parser.add_argument("--from", dest="sender", default="+15551234567")
    parser.add_argument("--to", dest="receiver", default="+15557654321")
    parser.add_argument("--body", default="hi")
    args = parser.parse_args()

    payload = build_payload(args.sender, args.receiver, args.body)
    headers = build_headers(args.mode, args.auth_token, args.url, payload)
    await send(args.target, headers, payload)


if __name__ == "__main__":
    asyncio.run(main())
