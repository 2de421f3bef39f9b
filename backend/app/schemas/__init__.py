"""Pydantic schemas for API request/response validation."""

from app.schemas.commerce import (
    AuditStampSchema,
    BubblingRuleSchema,
    ChangedSinceSchema,
    OrderCreateSchema,
    OrderItemCreateSchema,
    OrderItemSchema,
    OrderItemUpdateSchema,
    OrderSchema,
    ProductCreateSchema,
    ProductSchema,
    ProductUpdateSchema,
)

__all__ = [
    "AuditStampSchema",
    "BubblingRuleSchema",
    "ChangedSinceSchema",
    "OrderCreateSchema",
    "OrderItemCreateSchema",
    "OrderItemSchema",
    "OrderItemUpdateSchema",
    "OrderSchema",
    "ProductCreateSchema",
    "ProductSchema",
    "ProductUpdateSchema",
]
