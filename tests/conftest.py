"""
Test configuration and fixtures.
Uses a temporary SQLite file per test and cheap Argon2 costs.
Signatures are produced with the real Twilio RequestValidator (see helpers.py).
"""
import pytest

from smsledger.config import Settings
from smsledger.database import MessageStore

from helpers import AUTH_TOKEN, WEBHOOK_ENDPOINT


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        twilio_auth_token=AUTH_TOKEN,
        webhook_endpoint=WEBHOOK_ENDPOINT,
        message_store_db=str(tmp_path / "messages.db"),
        log_level="WARNING",
        identity_hash_time_cost=1,
        identity_hash_memory_cost=1024,
        identity_hash_parallelism=1,
        identity_hash_length=32,
    )


@pytest.fixture
async def store(settings):
    message_store = MessageStore(settings.database_url)
    await message_store.init_schema()
    yield message_store
    await message_store.dispose()


@pytest.fixture
async def db(store):
    async with store.session_factory() as session:
        yield session


@pytest.fixture
def sms_params():
    """Form fields of the reference inbound SMS."""
    return {
        "SmsMessageSid": "SM123",
        "MessageSid": "SM123",
        "AccountSid": "AC456",
        "ApiVersion": "2010-04-01",
        "From": "+15551234567",
        "To": "+15557654321",
        "Body": "hi",
        "NumMedia": "0",
    }
