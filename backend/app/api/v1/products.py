"""Product endpoints."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.crud.commerce import create_product, get_product, update_product
from app.models.base import get_async_session
from app.schemas.commerce import (
    ProductCreateSchema,
    ProductSchema,
    ProductUpdateSchema,
)

router = APIRouter()


@router.post("", status_code=201)
async def create(
    data: ProductCreateSchema,
    session: AsyncSession = Depends(get_async_session),
) -> ProductSchema:
    """Create a product. Both audit timestamps start at the commit time."""
    product = await create_product(session, data)
    return ProductSchema.model_validate(product)


@router.get("/{product_id}")
async def read(
    product_id: int,
    session: AsyncSession = Depends(get_async_session),
) -> ProductSchema:
    product = await get_product(session, product_id)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return ProductSchema.model_validate(product)


@router.patch("/{product_id}")
async def update(
    product_id: int,
    data: ProductUpdateSchema,
    session: AsyncSession = Depends(get_async_session),
) -> ProductSchema:
    """Update a product.

    Products do not bubble into the items that reference them unless a
    Product:OrderItem rule is configured.
    """
    product = await update_product(session, product_id, data)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return ProductSchema.model_validate(product)
