"""Audit configuration endpoints."""

from fastapi import APIRouter

from app.models.base import bubbling_policy
from app.schemas.commerce import BubblingRuleSchema

router = APIRouter()


@router.get("/rules")
async def list_rules() -> list[BubblingRuleSchema]:
    """List the active child -> parent bubbling rules."""
    return [
        BubblingRuleSchema(child_kind=child, parent_kind=parent)
        for child, parent in sorted(bubbling_policy.rules)
    ]
