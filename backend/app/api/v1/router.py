"""API v1 router combining all endpoint routers."""

from fastapi import APIRouter

from app.api.v1 import audit, order_items, orders, products

api_router = APIRouter()

api_router.include_router(products.router, prefix="/products", tags=["products"])
api_router.include_router(orders.router, prefix="/orders", tags=["orders"])
api_router.include_router(
    order_items.router, prefix="/order-items", tags=["order-items"]
)
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
