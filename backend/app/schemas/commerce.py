"""Pydantic schemas for commerce entities and their audit timestamps.

Used for API request bodies and responses. Response schemas are built
straight from ORM objects (``from_attributes``).
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class AuditStampSchema(BaseModel):
    """The two audit timestamps every auditable record carries.

    Attributes:
        last_modified: Last direct change to this record.
        last_modified_with_dependents: Last change to this record or to any
            record that bubbles into it.
    """

    model_config = ConfigDict(from_attributes=True)

    last_modified: datetime
    last_modified_with_dependents: datetime


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------


class ProductCreateSchema(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0, decimal_places=2)


class ProductUpdateSchema(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    price: Decimal | None = Field(None, ge=0, decimal_places=2)


class ProductSchema(AuditStampSchema):
    product_id: int
    name: str
    price: Decimal


# ---------------------------------------------------------------------------
# Order items
# ---------------------------------------------------------------------------


class OrderItemCreateSchema(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)
    unit_price: Decimal | None = Field(
        None, ge=0, description="Defaults to the product's current price"
    )


class OrderItemUpdateSchema(BaseModel):
    quantity: int | None = Field(None, ge=1)
    unit_price: Decimal | None = Field(None, ge=0)


class OrderItemSchema(AuditStampSchema):
    order_item_id: int
    order_id: int
    product_id: int
    quantity: int
    unit_price: Decimal


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------


class OrderCreateSchema(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=200)


class OrderSchema(AuditStampSchema):
    order_id: int
    customer_name: str
    items: list[OrderItemSchema] = Field(default_factory=list)


class ChangedSinceSchema(BaseModel):
    """Answer to "has anything under this record changed since T?"."""

    changed: bool
    since: datetime
    last_modified_with_dependents: datetime


class BubblingRuleSchema(BaseModel):
    child_kind: str
    parent_kind: str
