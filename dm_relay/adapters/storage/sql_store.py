"""Relational storage adapter on SQLAlchemy's async ORM — implements StoragePort."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from dm_relay.adapters.storage.tables import Base, MessageReplyRow, TokenSubmissionRow, UserRow
from dm_relay.domain.models import AppUser, CredentialSubmission, ReplyRecord
from dm_relay.errors import PersistenceError, ValidationError
from dm_relay.ports.inbound import IncomingReply


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _submission(row: TokenSubmissionRow) -> CredentialSubmission:
    return CredentialSubmission(
        id=row.id,
        token=row.bot_token,
        application_id=row.client_id,
        submitted_at=_aware(row.timestamp),
    )


def _reply(row: MessageReplyRow) -> ReplyRecord:
    return ReplyRecord(
        id=row.id,
        user_id=row.user_id,
        username=row.username,
        content=row.content,
        source_message_id=row.message_id,
        timestamp=_aware(row.timestamp),
        avatar_url=row.avatar_url,
        guild_id=row.guild_id,
        guild_name=row.guild_name,
    )


def _user(row: UserRow) -> AppUser:
    return AppUser(id=row.id, username=row.username, password=row.password)


class SqlStorage:
    """Durable storage backed by any SQLAlchemy async URL.

    Every driver or SQL failure surfaces as PersistenceError.
    """

    def __init__(self, database_url: str, echo: bool = False):
        self._database_url = database_url
        self._echo = echo
        self._engine = None
        self._session_factory = None

    @property
    def engine(self):
        return self._engine

    async def initialize(self) -> None:
        try:
            self._engine = create_async_engine(
                self._database_url,
                echo=self._echo,
                pool_pre_ping=True,
            )
            self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
            async with self._engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            raise PersistenceError(f"Database unavailable: {e}") from e

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None

    @asynccontextmanager
    async def session_scope(self) -> AsyncIterator[AsyncSession]:
        if self._session_factory is None:
            raise PersistenceError("Database not initialized")
        session = self._session_factory()
        try:
            yield session
            await session.commit()
        except IntegrityError as e:
            await session.rollback()
            raise ValidationError("Record conflicts with stored data") from e
        except (SQLAlchemyError, OSError) as e:
            await session.rollback()
            raise PersistenceError(str(e)) from e
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    async def save_submission(
        self, token: str, application_id: Optional[str], submitted_at: datetime
    ) -> CredentialSubmission:
        async with self.session_scope() as session:
            row = TokenSubmissionRow(
                bot_token=token,
                client_id=application_id or None,
                timestamp=submitted_at,
            )
            session.add(row)
            await session.flush()
            return _submission(row)

    async def list_submissions(self) -> List[CredentialSubmission]:
        async with self.session_scope() as session:
            result = await session.execute(select(TokenSubmissionRow).order_by(TokenSubmissionRow.id))
            return [_submission(row) for row in result.scalars()]

    async def save_reply(self, reply: IncomingReply, received_at: datetime) -> ReplyRecord:
        async with self.session_scope() as session:
            row = MessageReplyRow(
                user_id=reply.user_id,
                username=reply.username,
                content=reply.content,
                message_id=reply.message_id,
                timestamp=received_at,
                avatar_url=reply.avatar_url or None,
                guild_id=reply.guild_id or None,
                guild_name=reply.guild_name or None,
            )
            session.add(row)
            await session.flush()
            return _reply(row)

    async def list_replies(self) -> List[ReplyRecord]:
        async with self.session_scope() as session:
            result = await session.execute(
                select(MessageReplyRow).order_by(MessageReplyRow.timestamp.desc(), MessageReplyRow.id.desc())
            )
            return [_reply(row) for row in result.scalars()]

    async def get_user(self, user_id: int) -> Optional[AppUser]:
        async with self.session_scope() as session:
            row = await session.get(UserRow, user_id)
            return _user(row) if row is not None else None

    async def get_user_by_username(self, username: str) -> Optional[AppUser]:
        async with self.session_scope() as session:
            result = await session.execute(select(UserRow).where(UserRow.username == username))
            row = result.scalar_one_or_none()
            return _user(row) if row is not None else None

    async def create_user(self, username: str, password: str) -> AppUser:
        async with self.session_scope() as session:
            row = UserRow(username=username, password=password)
            session.add(row)
            try:
                await session.flush()
            except IntegrityError as e:
                raise ValidationError.for_field("username", "Username already exists") from e
            return _user(row)
