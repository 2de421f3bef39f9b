"""Tests for tools.backfill_dependents."""

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import Engine, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.audit import BubblingPolicy
from app.audit.hook import AUDIT_DISABLED
from app.models import Base
from app.models.commerce import Order, OrderItem, Product
from tools.backfill_dependents import auditable_models, backfill, propagate_existing

T0 = datetime(2026, 1, 1, 12, 0, 0)
T1 = T0 + timedelta(hours=1)
T2 = T0 + timedelta(hours=2)


def _stamped(entity, direct: datetime, dependents: datetime):
    entity.last_modified = direct
    entity.last_modified_with_dependents = dependents
    return entity


def _seed_rows(session: Session) -> tuple[Order, OrderItem, OrderItem]:
    """An order whose items changed after it, written with auditing off."""
    session.info[AUDIT_DISABLED] = True
    order = _stamped(Order(customer_name="A"), T0, T0)
    product = _stamped(Product(name="P", price=Decimal("1.00")), T0, T0)
    newer = _stamped(OrderItem(order=order, product=product, unit_price=1), T2, T2)
    lagging = _stamped(OrderItem(order=order, product=product, unit_price=1), T1, T0)
    session.add_all([order, product, newer, lagging])
    session.commit()
    return order, newer, lagging


def test_auditable_models() -> None:
    assert auditable_models() == [Order, OrderItem, Product]


def test_propagate_existing_repairs_and_bubbles(db_engine: Engine) -> None:
    with Session(db_engine, expire_on_commit=False) as session:
        order, newer, lagging = _seed_rows(session)
        entities = [order, newer, lagging]

        result = propagate_existing(
            session, entities, BubblingPolicy.from_rules(["OrderItem:Order"])
        )

    assert result.rows_checked == 3
    assert result.rows_repaired == 1
    assert result.ancestors_raised == 1
    assert lagging.last_modified_with_dependents == T1
    assert order.last_modified == T0
    assert order.last_modified_with_dependents == T2
    assert newer.last_modified_with_dependents == T2


def test_propagate_existing_without_rules(db_engine: Engine) -> None:
    with Session(db_engine, expire_on_commit=False) as session:
        order, newer, lagging = _seed_rows(session)

        result = propagate_existing(session, [order, newer, lagging], BubblingPolicy())

    assert result.ancestors_raised == 0
    assert order.last_modified_with_dependents == T0


@pytest_asyncio.fixture
async def async_maker():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as session:
        await session.run_sync(_seed_rows)
    yield maker
    await engine.dispose()


async def _stored_order_stamp(maker) -> datetime:
    async with maker() as session:
        return await session.scalar(select(Order.last_modified_with_dependents))


@pytest.mark.asyncio
async def test_backfill_dry_run_leaves_database(async_maker) -> None:
    policy = BubblingPolicy.from_rules(["OrderItem:Order"])

    result = await backfill(async_maker, policy, dry_run=True)

    assert result.ancestors_raised == 1
    assert result.applied is False
    assert await _stored_order_stamp(async_maker) == T0


@pytest.mark.asyncio
async def test_backfill_apply_commits(async_maker) -> None:
    policy = BubblingPolicy.from_rules(["OrderItem:Order"])

    result = await backfill(async_maker, policy, dry_run=False)

    assert result.applied is True
    assert result.rows_checked == 4
    assert await _stored_order_stamp(async_maker) == T2
