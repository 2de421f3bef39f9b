"""Bubbling policy: which child -> parent edges propagate changes.

A policy is a set of ``(child_kind, parent_kind)`` pairs. Kinds are plain
strings; a class is reduced to its kind with :func:`kind_of`.

The policy is built at configuration time and treated as read-only once
sessions start flushing. Registering rules while a propagation run is in
flight is the caller's problem: nothing here locks.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from typing import Any

_RULE_SEPARATOR = re.compile(r"\s*(?:->|:)\s*")


def kind_of(obj: Any) -> str:
    """Return the audit kind for an entity instance or class.

    Classes may set ``__audit_kind__`` to decouple the kind from the class
    name (e.g. when two mapped classes share a logical category).
    """
    if isinstance(obj, str):
        return obj
    cls = obj if isinstance(obj, type) else type(obj)
    return getattr(cls, "__audit_kind__", None) or cls.__name__


class BubblingPolicy:
    """Registry of (child kind, parent kind) pairs allowed to bubble."""

    def __init__(self) -> None:
        self._pairs: set[tuple[str, str]] = set()

    @classmethod
    def from_rules(cls, rules: Iterable[str]) -> BubblingPolicy:
        """Build a policy from ``"Child:Parent"`` / ``"Child->Parent"`` strings.

        Raises:
            ValueError: If a rule does not name exactly one child and one parent.
        """
        policy = cls()
        for rule in rules:
            parts = _RULE_SEPARATOR.split(rule.strip())
            if len(parts) != 2 or not all(parts):
                raise ValueError(
                    f"Invalid bubbling rule {rule!r}: expected 'Child:Parent'"
                )
            policy.register(parts[0], parts[1])
        return policy

    def register(self, child: str | type, parent: str | type) -> None:
        """Allow changes on ``child`` entities to bubble to ``parent``.

        Registering the same pair again is a no-op.
        """
        self._pairs.add((kind_of(child), kind_of(parent)))

    def allows(self, child_kind: str, parent_kind: str) -> bool:
        return (child_kind, parent_kind) in self._pairs

    @property
    def rules(self) -> frozenset[tuple[str, str]]:
        return frozenset(self._pairs)

    def __len__(self) -> int:
        return len(self._pairs)

    def __repr__(self) -> str:
        rules = ", ".join(f"{c}->{p}" for c, p in sorted(self._pairs))
        return f"<BubblingPolicy({rules})>"
