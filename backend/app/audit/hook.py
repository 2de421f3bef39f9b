"""Commit hook: run the propagation engine inside every SQLAlchemy flush.

Installed as a ``before_flush`` listener. The engine mutates live ORM
instances; ancestors it bubbles to are re-added to the flushing session so
their new ``last_modified_with_dependents`` lands in the same transaction.

Usage::

    hook = AuditCommitHook(BubblingPolicy.from_rules(["OrderItem:Order"]))
    hook.install(AuditSession)          # a Session subclass, sessionmaker,
                                        # Session or AsyncSession instance
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session, SessionTransaction, UOWTransaction

from app.audit.engine import PropagationEngine, PropagationResult
from app.audit.policy import BubblingPolicy
from app.audit.session import SessionSnapshot

logger = logging.getLogger(__name__)

# Keys stored in Session.info
AUDIT_DISABLED = "audit_disabled"
AUDIT_TIMESTAMP = "audit_timestamp"


def utcnow() -> datetime:
    """Naive UTC now, matching what DateTime columns round-trip."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class AuditCommitHook:
    """Adapts :class:`PropagationEngine` to the SQLAlchemy flush cycle."""

    def __init__(
        self,
        policy: BubblingPolicy,
        engine: PropagationEngine | None = None,
        clock: Callable[[], datetime] = utcnow,
        timestamp_per_transaction: bool = True,
    ) -> None:
        self.policy = policy
        self.engine = engine or PropagationEngine()
        self.clock = clock
        self.timestamp_per_transaction = timestamp_per_transaction

    # =========================================================================
    # Installation
    # =========================================================================

    def _listeners(self) -> list[tuple[str, Callable[..., None]]]:
        return [
            ("before_flush", self.before_flush),
            ("after_transaction_end", self._reset_timestamp),
        ]

    def install(self, target: Any) -> None:
        """Attach to a Session class, sessionmaker or session instance."""
        if isinstance(target, AsyncSession):
            target = target.sync_session
        for name, fn in self._listeners():
            if not event.contains(target, name, fn):
                event.listen(target, name, fn)
        logger.debug("Audit hook installed on %r with %r", target, self.policy)

    def remove(self, target: Any) -> None:
        if isinstance(target, AsyncSession):
            target = target.sync_session
        for name, fn in self._listeners():
            if event.contains(target, name, fn):
                event.remove(target, name, fn)

    # =========================================================================
    # Session events
    # =========================================================================

    def before_flush(
        self,
        session: Session,
        flush_context: UOWTransaction | None,
        instances: Any,
    ) -> None:
        if session.info.get(AUDIT_DISABLED):
            return

        snapshot = SessionSnapshot.from_session(session)
        if not snapshot.changed:
            return

        result = self.engine.apply(snapshot, self.policy, self._timestamp(session))
        self._enlist(session, result)

    def _timestamp(self, session: Session) -> datetime:
        if not self.timestamp_per_transaction:
            return self.clock()
        timestamp = session.info.get(AUDIT_TIMESTAMP)
        if timestamp is None:
            timestamp = self.clock()
            session.info[AUDIT_TIMESTAMP] = timestamp
        return timestamp

    def _reset_timestamp(
        self, session: Session, transaction: SessionTransaction
    ) -> None:
        # Flushes and savepoints end child transactions; only the root clears.
        if transaction.parent is None:
            session.info.pop(AUDIT_TIMESTAMP, None)

    @staticmethod
    def _enlist(session: Session, result: PropagationResult) -> None:
        """Make sure bubbled ancestors are written by the current flush."""
        for entity in result.bubbled:
            session.add(entity)
        if result.bubbled:
            logger.debug(
                "Bubbled audit timestamp to %d ancestor(s)", len(result.bubbled)
            )
