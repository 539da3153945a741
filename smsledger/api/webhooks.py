"""
Catch-all Twilio SMS webhook.

Every path and method lands here. Requests carrying Twilio headers are
verified, hashed, and recorded (authentic or not) before the response is
chosen; anything else gets the generic rejection and is never stored.
"""
import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from smsledger.config import Settings
from smsledger.database import get_db
from smsledger.schemas.message_context import InboundMessageContext
from smsledger.schemas.webhook_payloads import TwilioSmsPayload
from smsledger.services.message_store import record_inbound_message
from smsledger.utils.request_identity import derive_request_identity
from smsledger.utils.webhook_signatures import (
    IDEMPOTENCY_HEADER,
    SIGNATURE_HEADER,
    has_provider_headers,
    validate_twilio_signature,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["webhooks"])

ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS"]

EMPTY_TWIML = "<Response></Response>"
INVALID_REQUEST_ERROR = {"error": "Invalid Twilio request found."}
NOT_AUTHENTICATED_ERROR = {"error": "Not Authenticated."}


def _app_settings(request: Request) -> Settings:
    return request.app.state.settings


async def _read_form_params(request: Request) -> dict:
    """
    Text form fields, last value wins for repeated keys.
    File parts are dropped and an unparseable body yields no fields, so the
    callback is still verified (and fails) and recorded.
    """
    try:
        async with request.form() as form:
            return {key: value for key, value in form.items() if isinstance(value, str)}
    except (HTTPException, MultiPartException) as e:
        logger.warning("Unparseable Twilio callback body, recording without fields: %s", str(e))
        return {}


@router.api_route("/{full_path:path}", methods=ALL_METHODS, response_model=None)
async def twilio_sms_webhook(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(_app_settings),
) -> Response:
    if not has_provider_headers(request.headers):
        return JSONResponse(NOT_AUTHENTICATED_ERROR)

    received_on = time.time()
    signature = request.headers.get(SIGNATURE_HEADER, "")
    idempotency_token = request.headers.get(IDEMPOTENCY_HEADER, "")
    params = await _read_form_params(request)
    payload = TwilioSmsPayload.model_validate(params)

    is_authentic = validate_twilio_signature(
        settings.twilio_auth_token,
        signature,
        settings.webhook_endpoint,
        params,
    )
    request_uid = await derive_request_identity(
        signature, idempotency_token, payload.SmsMessageSid, settings=settings,
    )

    context = InboundMessageContext(
        received_on=received_on,
        signature=signature,
        idempotency_token=idempotency_token,
        request_body=payload,
        webhook_endpoint=settings.webhook_endpoint,
        is_authentic=is_authentic,
        request_uid=request_uid,
    )
    await record_inbound_message(db, context)

    log_extra = {"message_sid": payload.SmsMessageSid, "is_authentic": is_authentic}
    if is_authentic:
        logger.info("Inserted a valid Twilio SMS: %s", payload.SmsMessageSid, extra=log_extra)
        return Response(content=EMPTY_TWIML, media_type="text/html", status_code=200)

    logger.warning("Inserted an invalid Twilio SMS: %s", payload.SmsMessageSid, extra=log_extra)
    return JSONResponse(INVALID_REQUEST_ERROR, status_code=400)
