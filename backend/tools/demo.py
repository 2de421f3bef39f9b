"""Walk through the order / item / product scenario on an in-memory database.

Each step commits through a session with the audit hook installed and
records both timestamps of every row, so the effect of bubbling (and of its
absence) is visible side by side.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from app.audit import AuditCommitHook, BubblingPolicy, utcnow
from app.models.base import Base
from app.models.commerce import Order, OrderItem, Product


class DemoSession(Session):
    """Session class private to the demo so its hook stays local."""


@dataclass
class RowStamp:
    label: str
    last_modified: datetime
    last_modified_with_dependents: datetime


@dataclass
class DemoStep:
    title: str
    note: str
    rows: list[RowStamp] = field(default_factory=list)

    def row(self, label: str) -> RowStamp:
        return next(r for r in self.rows if r.label == label)


def demo_policy() -> BubblingPolicy:
    """OrderItem changes bubble to Order; Product changes stay put."""
    policy = BubblingPolicy()
    policy.register(OrderItem, Order)
    return policy


def _stamp(label: str, entity: Product | Order | OrderItem) -> RowStamp:
    return RowStamp(
        label=label,
        last_modified=entity.last_modified,
        last_modified_with_dependents=entity.last_modified_with_dependents,
    )


async def run_demo(
    delay: float = 0.1,
    clock: Callable[[], datetime] = utcnow,
) -> list[DemoStep]:
    """Run the four-step scenario and return the recorded timestamps.

    Args:
        delay: Seconds to sleep between steps so wall-clock stamps differ.
        clock: Timestamp source for the audit hook.
    """
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    hook = AuditCommitHook(demo_policy(), clock=clock)
    hook.install(DemoSession)
    steps: list[DemoStep] = []

    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        session_maker = async_sessionmaker(
            engine, expire_on_commit=False, sync_session_class=DemoSession
        )
        async with session_maker() as session:
            product = Product(name="Laptop", price=Decimal("999.99"))
            order = Order(customer_name="Jan Kowalski")
            session.add_all([product, order])
            await session.commit()
            steps.append(
                _record(
                    "Creating initial data", "Both timestamps equal.", product, order
                )
            )
            await asyncio.sleep(delay)

            item = OrderItem(
                order_id=order.order_id,
                product_id=product.product_id,
                quantity=2,
                unit_price=product.price,
            )
            session.add(item)
            await session.commit()
            steps.append(
                _record(
                    "Adding OrderItem to Order",
                    "Order.last_modified_with_dependents follows the new item; "
                    "Product is untouched (no Product rule).",
                    product,
                    order,
                    item,
                )
            )
            await asyncio.sleep(delay)

            product.price = Decimal("899.99")
            await session.commit()
            steps.append(
                _record(
                    "Changing Product price",
                    "Only the product moves; nothing bubbles from Product.",
                    product,
                    order,
                    item,
                )
            )
            await asyncio.sleep(delay)

            item.quantity = 3
            await session.commit()
            steps.append(
                _record(
                    "Changing OrderItem quantity",
                    "The item and the order's dependents stamp move; "
                    "Order.last_modified stays put.",
                    product,
                    order,
                    item,
                )
            )
    finally:
        hook.remove(DemoSession)
        await engine.dispose()

    return steps


def _record(
    title: str,
    note: str,
    product: Product,
    order: Order,
    item: OrderItem | None = None,
) -> DemoStep:
    step = DemoStep(title=title, note=note)
    step.rows.append(_stamp("Product", product))
    step.rows.append(_stamp("Order", order))
    if item is not None:
        step.rows.append(_stamp("OrderItem", item))
    return step


def format_steps(steps: list[DemoStep]) -> str:
    fmt = "%Y-%m-%d %H:%M:%S.%f"
    lines = ["=== Bubbling Audit Trail Demo ===", ""]
    for number, step in enumerate(steps, start=1):
        lines.append(f"{number}. {step.title}")
        lines.append(f"   {step.note}")
        for row in step.rows:
            lines.append(f"   {row.label}")
            lines.append(f"   - LastModified:               {row.last_modified:{fmt}}")
            lines.append(
                "   - LastModifiedWithDependents: "
                f"{row.last_modified_with_dependents:{fmt}}"
            )
        lines.append("")
    return "\n".join(lines)
