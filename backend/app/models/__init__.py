"""SQLAlchemy models for the bubbling audit trail."""

from app.models.base import (
    AuditableMixin,
    AuditSession,
    Base,
    async_session_maker,
    audit_hook,
    bubbling_policy,
    engine,
    get_async_session,
)
from app.models.commerce import Order, OrderItem, Product

__all__ = [
    # Base
    "Base",
    "AuditableMixin",
    "AuditSession",
    "async_session_maker",
    "get_async_session",
    "engine",
    # Audit
    "audit_hook",
    "bubbling_policy",
    # Commerce
    "Order",
    "OrderItem",
    "Product",
]
