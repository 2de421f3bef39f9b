"""Order item endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.commerce import update_order_item
from app.models.base import get_async_session
from app.schemas.commerce import OrderItemSchema, OrderItemUpdateSchema

router = APIRouter()


@router.patch("/{order_item_id}")
async def update(
    order_item_id: int,
    data: OrderItemUpdateSchema,
    session: AsyncSession = Depends(get_async_session),
) -> OrderItemSchema:
    """Update a line item; the owning order's dependents stamp follows."""
    item = await update_order_item(session, order_item_id, data)
    if item is None:
        raise HTTPException(
            status_code=404, detail=f"Order item {order_item_id} not found"
        )
    return OrderItemSchema.model_validate(item)
