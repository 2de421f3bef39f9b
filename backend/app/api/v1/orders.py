"""Order endpoints, including the subtree change check."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.commerce import (
    add_order_item,
    create_order,
    get_order,
    get_order_dependents_stamp,
    get_product,
)
from app.models.base import get_async_session
from app.schemas.commerce import (
    ChangedSinceSchema,
    OrderCreateSchema,
    OrderItemCreateSchema,
    OrderItemSchema,
    OrderSchema,
)

router = APIRouter()


@router.post("", status_code=201)
async def create(
    data: OrderCreateSchema,
    session: AsyncSession = Depends(get_async_session),
) -> OrderSchema:
    order = await create_order(session, data)
    return OrderSchema.model_validate(order)


@router.get("/{order_id}")
async def read(
    order_id: int,
    session: AsyncSession = Depends(get_async_session),
) -> OrderSchema:
    """Get an order with its items and audit timestamps."""
    order = await get_order(session, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    return OrderSchema.model_validate(order)


@router.get("/{order_id}/changed-since")
async def changed_since(
    order_id: int,
    since: datetime = Query(..., description="Naive UTC timestamp to compare with"),
    session: AsyncSession = Depends(get_async_session),
) -> ChangedSinceSchema:
    """Has the order or anything bubbling into it changed after ``since``?

    Answered from the order row alone; items are not scanned.
    """
    stamp = await get_order_dependents_stamp(session, order_id)
    if stamp is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    if since.tzinfo is not None:
        since = since.astimezone(timezone.utc).replace(tzinfo=None)
    return ChangedSinceSchema(
        changed=stamp > since,
        since=since,
        last_modified_with_dependents=stamp,
    )


@router.post("/{order_id}/items", status_code=201)
async def add_item(
    order_id: int,
    data: OrderItemCreateSchema,
    session: AsyncSession = Depends(get_async_session),
) -> OrderItemSchema:
    """Add a line item to an order."""
    order = await get_order(session, order_id)
    if order is None:
        raise HTTPException(status_code=404, detail=f"Order {order_id} not found")
    product = await get_product(session, data.product_id)
    if product is None:
        raise HTTPException(
            status_code=404, detail=f"Product {data.product_id} not found"
        )
    item = await add_order_item(session, order, product, data)
    return OrderItemSchema.model_validate(item)
