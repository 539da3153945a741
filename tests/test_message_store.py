"""
Tests for the audit + record writer and the message store lifecycle.
"""
import json
from unittest.mock import patch

import pytest
from pydantic_core import PydanticSerializationError
from sqlalchemy import func, select, text

from smsledger.database import MessageStore
from smsledger.errors import SchemaInitializationError, StorageWriteError
from smsledger.models import sms, twilio_messages
from smsledger.schemas.message_context import InboundMessageContext
from smsledger.services.message_store import authenticity_flag, record_inbound_message

from helpers import WEBHOOK_ENDPOINT, make_context


async def _count(db, table) -> int:
    result = await db.execute(select(func.count()).select_from(table))
    count = result.scalar_one()
    await db.rollback()
    return count


class TestAuthenticityFlag:
    def test_true_maps_to_one(self):
        assert authenticity_flag(True) == 1

    def test_false_maps_to_zero(self):
        assert authenticity_flag(False) == 0

    def test_returns_plain_int(self):
        assert type(authenticity_flag(True)) is int
        assert type(authenticity_flag(False)) is int


class TestRecordInboundMessage:
    async def test_writes_one_audit_row_and_one_sms_row(self, db, sms_params):
        context = make_context(sms_params, signature="sig-abc", is_authentic=True)

        await record_inbound_message(db, context)

        audit = (await db.execute(select(twilio_messages))).mappings().all()
        messages = (await db.execute(select(sms))).mappings().all()
        await db.rollback()

        assert len(audit) == 1
        assert len(messages) == 1
        row = audit[0]
        assert row["received_on"] == 1700000000.25
        assert row["twilio_signature"] == "sig-abc"
        assert row["twilio_idempotency_token"] == "idem-1"
        assert row["twilio_sms_message_sid"] == "SM123"
        assert row["twilio_account_sid"] == "AC456"
        assert row["twilio_api_version"] == "2010-04-01"
        assert row["webhook_endpoint"] == WEBHOOK_ENDPOINT
        assert row["is_authentic_request"] == 1

        message = messages[0]
        assert message["hash_id"] == context.request_uid
        assert message["sender"] == "+15551234567"
        assert message["receiver"] == "+15557654321"
        assert message["body"] == "hi"
        assert message["received_on"] == row["received_on"]

    async def test_raw_request_is_full_snapshot(self, db, sms_params):
        context = make_context(sms_params, is_authentic=False)

        await record_inbound_message(db, context)

        raw = (await db.execute(select(twilio_messages.c.raw_request))).scalar_one()
        await db.rollback()
        snapshot = json.loads(raw)
        assert snapshot["is_authentic"] is False
        assert snapshot["request_uid"] == context.request_uid
        assert snapshot["request_body"]["From"] == "+15551234567"
        # Provider fields outside the consumed set are kept
        assert snapshot["request_body"]["NumMedia"] == "0"

    async def test_inauthentic_stored_as_zero(self, db, sms_params):
        await record_inbound_message(db, make_context(sms_params, is_authentic=False))

        flag = (await db.execute(select(twilio_messages.c.is_authentic_request))).scalar_one()
        await db.rollback()
        assert flag == 0

    async def test_identical_requests_are_both_stored(self, db, sms_params):
        """Replays must show up as separate rows, never as constraint violations."""
        context = make_context(sms_params)

        await record_inbound_message(db, context)
        await record_inbound_message(db, context)

        hash_ids = (await db.execute(select(sms.c.hash_id))).scalars().all()
        await db.rollback()
        assert await _count(db, twilio_messages) == 2
        assert hash_ids == [context.request_uid, context.request_uid]

    async def test_missing_body_fields_recorded_as_empty(self, db):
        await record_inbound_message(db, make_context({}))

        message = (await db.execute(select(sms))).mappings().one()
        await db.rollback()
        assert message["sender"] == ""
        assert message["receiver"] == ""
        assert message["body"] == ""

    async def test_failed_sms_insert_rolls_back_audit_row(self, store, db, sms_params):
        async with store.engine.begin() as conn:
            await conn.execute(text("DROP TABLE sms"))

        with pytest.raises(StorageWriteError):
            await record_inbound_message(db, make_context(sms_params))

        assert await _count(db, twilio_messages) == 0

    async def test_serialization_failure_writes_nothing(self, db, sms_params):
        with patch.object(
            InboundMessageContext,
            "model_dump_json",
            side_effect=PydanticSerializationError("unserializable"),
        ):
            with pytest.raises(StorageWriteError):
                await record_inbound_message(db, make_context(sms_params))

        assert await _count(db, twilio_messages) == 0
        assert await _count(db, sms) == 0

    async def test_session_usable_after_failure(self, store, db, sms_params):
        async with store.engine.begin() as conn:
            await conn.execute(text("DROP TABLE sms"))
        with pytest.raises(StorageWriteError):
            await record_inbound_message(db, make_context(sms_params))

        await store.init_schema()
        await record_inbound_message(db, make_context(sms_params))
        assert await _count(db, sms) == 1


class TestMessageStore:
    async def test_secure_delete_enabled(self, db):
        result = await db.execute(text("PRAGMA secure_delete"))
        assert result.scalar_one() == 1
        await db.rollback()

    async def test_tables_have_no_primary_key(self, db):
        for table in ("twilio_messages", "sms"):
            columns = (await db.execute(text(f"PRAGMA table_info({table})"))).mappings().all()
            assert all(column["pk"] == 0 for column in columns)
        await db.rollback()

    async def test_init_schema_is_idempotent(self, store, db, sms_params):
        await record_inbound_message(db, make_context(sms_params))

        await store.init_schema()

        assert await _count(db, twilio_messages) == 1

    async def test_unopenable_database_raises_schema_error(self, tmp_path):
        store = MessageStore(f"sqlite+aiosqlite:///{tmp_path}/missing/dir/messages.db")
        with pytest.raises(SchemaInitializationError):
            await store.init_schema()
        await store.dispose()
