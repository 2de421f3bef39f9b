"""Bubbling audit trail: direct and dependents timestamps for related records."""

from app.audit.engine import PropagationEngine, PropagationResult
from app.audit.hook import AuditCommitHook, utcnow
from app.audit.policy import BubblingPolicy, kind_of
from app.audit.session import SessionSnapshot
from app.audit.snapshot import Auditable, ChangeSnapshot, InMemorySnapshot, ParentLink

__all__ = [
    "Auditable",
    "AuditCommitHook",
    "BubblingPolicy",
    "ChangeSnapshot",
    "InMemorySnapshot",
    "ParentLink",
    "PropagationEngine",
    "PropagationResult",
    "SessionSnapshot",
    "kind_of",
    "utcnow",
]
