"""Base model class, audit mixin and database session configuration."""

from collections.abc import AsyncGenerator
from datetime import datetime

from sqlalchemy import DateTime, MetaData
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from app.audit import AuditCommitHook, BubblingPolicy, utcnow
from app.config import settings

# Naming convention for constraints (helps with migrations)
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)


class Base(DeclarativeBase):
    """Base class for all models."""

    metadata = metadata


class AuditableMixin:
    """Mixin that adds the direct and dependents audit timestamps.

    Both columns are maintained by the audit commit hook on flush; the
    defaults only cover rows written with the hook suspended.
    """

    last_modified: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )
    last_modified_with_dependents: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, nullable=False
    )


class AuditSession(Session):
    """Sync session class behind every AsyncSession; carries the audit hook."""


bubbling_policy = BubblingPolicy.from_rules(settings.audit_bubbling_rules)
audit_hook = AuditCommitHook(
    bubbling_policy,
    timestamp_per_transaction=settings.audit_timestamp_per_transaction,
)
audit_hook.install(AuditSession)

# Async engine and session
engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session_maker = async_sessionmaker(
    engine, expire_on_commit=False, sync_session_class=AuditSession
)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with async_session_maker() as session:
        yield session
