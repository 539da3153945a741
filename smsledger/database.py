"""
Async SQLAlchemy engine and session management for the SQLite message store.
Uses the aiosqlite driver. The store is opened once in the app lifespan and
handed to request handlers through app.state, never through module globals.
"""
import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import event
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from smsledger.errors import SchemaInitializationError

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def _enable_secure_delete(dbapi_connection, connection_record) -> None:
    """Deleted rows are overwritten on disk rather than just unlinked."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA secure_delete = ON")
    cursor.close()


class MessageStore:
    """Process-wide handle on the message store engine and its session factory."""

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = create_async_engine(database_url, echo=echo)
        event.listen(self.engine.sync_engine, "connect", _enable_secure_delete)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

    async def init_schema(self) -> None:
        """Create twilio_messages and sms if they do not exist yet."""
        import smsledger.models  # noqa: F401  (registers tables on Base.metadata)

        try:
            async with self.engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except SQLAlchemyError as e:
            raise SchemaInitializationError(f"Could not create message store tables: {e}") from e
        logger.info("Message store schema ready")

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a session bound to the app's message store."""
    store: MessageStore = request.app.state.message_store
    async with store.session_factory() as session:
        yield session
