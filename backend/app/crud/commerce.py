"""CRUD operations for products, orders and order items.

Writes go through the normal session flush, so the audit hook stamps
changed rows and bubbles to their parents; nothing here touches the audit
columns directly.
"""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.commerce import Order, OrderItem, Product
from app.schemas.commerce import (
    OrderCreateSchema,
    OrderItemCreateSchema,
    OrderItemUpdateSchema,
    ProductCreateSchema,
    ProductUpdateSchema,
)


async def create_product(session: AsyncSession, data: ProductCreateSchema) -> Product:
    product = Product(name=data.name, price=data.price)
    session.add(product)
    await session.commit()
    return product


async def get_product(session: AsyncSession, product_id: int) -> Product | None:
    return await session.get(Product, product_id)


async def update_product(
    session: AsyncSession, product_id: int, data: ProductUpdateSchema
) -> Product | None:
    product = await session.get(Product, product_id)
    if product is None:
        return None
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(product, key, value)
    await session.commit()
    return product


async def create_order(session: AsyncSession, data: OrderCreateSchema) -> Order:
    order = Order(customer_name=data.customer_name, items=[])
    session.add(order)
    await session.commit()
    return order


async def get_order(session: AsyncSession, order_id: int) -> Order | None:
    """Load an order together with its items."""
    result = await session.execute(
        select(Order)
        .options(selectinload(Order.items))
        .where(Order.order_id == order_id)
    )
    return result.scalar_one_or_none()


async def get_order_dependents_stamp(
    session: AsyncSession, order_id: int
) -> datetime | None:
    """Return an order's last_modified_with_dependents without loading items."""
    result = await session.execute(
        select(Order.last_modified_with_dependents).where(Order.order_id == order_id)
    )
    return result.scalar_one_or_none()


async def add_order_item(
    session: AsyncSession,
    order: Order,
    product: Product,
    data: OrderItemCreateSchema,
) -> OrderItem:
    """Add a line item; the order's dependents stamp moves with the commit."""
    unit_price = data.unit_price if data.unit_price is not None else product.price
    item = OrderItem(
        order=order,
        product=product,
        quantity=data.quantity,
        unit_price=unit_price,
    )
    session.add(item)
    await session.commit()
    return item


async def update_order_item(
    session: AsyncSession, order_item_id: int, data: OrderItemUpdateSchema
) -> OrderItem | None:
    item = await session.get(OrderItem, order_item_id)
    if item is None:
        return None
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(item, key, value)
    await session.commit()
    return item
