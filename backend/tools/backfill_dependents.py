"""Recompute last_modified_with_dependents for rows already in the database.

Needed after adding a bubbling rule to a populated database, or after
writes that bypassed the audit hook. Two steps:

1. Repair rows whose dependents stamp lags their direct stamp.
2. Push every row's dependents stamp up the configured rules, newest
   first, so each ancestor ends at the maximum of its subtree.

Usage:
    uv run python -m tools.cli backfill          # dry-run
    uv run python -m tools.cli backfill --apply  # commit changes
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import Session

from app.audit import BubblingPolicy, PropagationEngine, SessionSnapshot
from app.audit.hook import AUDIT_DISABLED
from app.models import AuditableMixin, Base

logger = logging.getLogger(__name__)


@dataclass
class BackfillResult:
    rows_checked: int = 0
    rows_repaired: int = 0
    ancestors_raised: int = 0
    applied: bool = False


def auditable_models() -> list[type[Any]]:
    """All mapped classes that carry the audit columns."""
    return sorted(
        (
            mapper.class_
            for mapper in Base.registry.mappers
            if issubclass(mapper.class_, AuditableMixin)
        ),
        key=lambda cls: cls.__name__,
    )


def propagate_existing(
    session: Session,
    entities: list[Any],
    policy: BubblingPolicy,
    engine: PropagationEngine | None = None,
) -> BackfillResult:
    """Repair and re-bubble ``entities`` in place (sync; no commit)."""
    engine = engine or PropagationEngine()
    result = BackfillResult(rows_checked=len(entities))

    for entity in entities:
        dependents = entity.last_modified_with_dependents
        if dependents is None or dependents < entity.last_modified:
            entity.last_modified_with_dependents = entity.last_modified
            result.rows_repaired += 1

    snapshot = SessionSnapshot(session, [])
    raised: set[int] = set()
    ordered = sorted(
        entities, key=lambda e: e.last_modified_with_dependents, reverse=True
    )
    for entity in ordered:
        for ancestor in engine.bubble(
            [entity], snapshot, policy, entity.last_modified_with_dependents
        ):
            raised.add(id(ancestor))
    result.ancestors_raised = len(raised)
    return result


async def backfill(
    session_maker: async_sessionmaker[AsyncSession],
    policy: BubblingPolicy,
    *,
    dry_run: bool = True,
) -> BackfillResult:
    """Repair and propagate dependents stamps across all auditable tables.

    The audit hook is suspended for the session so the repair itself does
    not restamp rows with the current time.
    """
    async with session_maker() as session:
        session.info[AUDIT_DISABLED] = True

        entities: list[Any] = []
        for model in auditable_models():
            rows = (await session.scalars(select(model))).all()
            logger.info("Loaded %d %s rows", len(rows), model.__name__)
            entities.extend(rows)

        result = await session.run_sync(propagate_existing, entities, policy)

        if dry_run:
            await session.rollback()
        else:
            await session.commit()
            result.applied = True

    mode = "DRY-RUN" if dry_run else "APPLIED"
    logger.info(
        "[%s] %d rows checked, %d repaired, %d ancestors raised",
        mode,
        result.rows_checked,
        result.rows_repaired,
        result.ancestors_raised,
    )
    return result
