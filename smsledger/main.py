"""
SMS Ledger - authenticated Twilio SMS webhook ingestion with a forensic audit trail.
Main FastAPI application entry point.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from smsledger.api.router import api_router
from smsledger.config import Settings, get_settings
from smsledger.database import MessageStore
from smsledger.errors import SmsLedgerError
from smsledger.utils.logging import bind_correlation_id, configure_structured_logging

logger = logging.getLogger("smsledger")


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Injects a correlation ID into every request context and response header."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = bind_correlation_id(request.headers.get("X-Correlation-ID"))
        response = await call_next(request)
        response.headers["X-Correlation-ID"] = cid
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the message store and create its tables before serving any request."""
    settings: Settings = app.state.settings
    logger.info("SMS Ledger starting up (env=%s)", settings.app_env)

    if settings.sentry_dsn:
        try:
            import sentry_sdk
            sentry_sdk.init(
                dsn=settings.sentry_dsn,
                traces_sample_rate=0.1,
                environment=settings.app_env,
            )
            logger.info("Sentry initialized")
        except Exception as e:
            logger.warning("Sentry initialization failed: %s", str(e))

    store = MessageStore(settings.database_url)
    try:
        await store.init_schema()
    except SmsLedgerError:
        logger.critical("Message store schema could not be initialized - refusing to start")
        await store.dispose()
        raise
    app.state.message_store = store

    yield

    logger.info("SMS Ledger shutting down - closing message store")
    await store.dispose()


async def _handle_ingestion_failure(request: Request, exc: SmsLedgerError) -> JSONResponse:
    """Hashing and storage faults fail the request without exposing details."""
    logger.error(
        "Inbound Twilio request not recorded: %s", str(exc),
        exc_info=exc,
        extra={"error_code": type(exc).__name__},
    )
    return JSONResponse({"error": "Not Authenticated."}, status_code=500)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Application factory."""
    settings = settings or get_settings()

    configure_structured_logging(settings.log_level)

    application = FastAPI(
        title="SMS Ledger",
        description="Authenticated Twilio SMS webhook ingestion and audit trail",
        version="1.0.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.state.settings = settings

    application.add_middleware(CorrelationIdMiddleware)
    application.add_exception_handler(SmsLedgerError, _handle_ingestion_failure)
    application.include_router(api_router)

    return application


def run() -> None:
    """Console entry point: serve the app on a TCP port or a unix socket."""
    import uvicorn

    settings = get_settings()
    app = create_app(settings)
    if settings.app_uds:
        uvicorn.run(app, uds=settings.app_uds, log_config=None)
    else:
        uvicorn.run(app, host=settings.app_host, port=settings.app_port, log_config=None)


if __name__ == "__main__":
    run()
