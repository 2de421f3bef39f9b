"""Change snapshots: the engine's view of one commit.

A snapshot reports which entities were directly added or modified and how
to reach each entity's many-to-one parents. The engine only consumes it;
building one is the storage layer's job (see ``app.audit.session`` for the
SQLAlchemy adapter).
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, NamedTuple, Protocol, runtime_checkable


@runtime_checkable
class Auditable(Protocol):
    """Anything carrying the two audit timestamps."""

    last_modified: datetime | None
    last_modified_with_dependents: datetime | None


class ParentLink(NamedTuple):
    """A structural many-to-one edge from an entity to one live parent."""

    edge: str
    parent: Any


class ChangeSnapshot(Protocol):
    """What the propagation engine needs from the storage layer."""

    @property
    def changed(self) -> Sequence[Any]:
        """Live entities added or modified in this commit, in report order."""
        ...

    def parents_of(self, entity: Any) -> Sequence[ParentLink]:
        """Currently resolved many-to-one targets of ``entity`` (may be empty)."""
        ...


@dataclass
class InMemorySnapshot:
    """Snapshot over a plain object graph.

    ``parents`` maps ``id(entity)`` to its parent links. Alternatively pass
    ``resolver`` to compute the links on demand; it wins over ``parents``.
    """

    changed: list[Any] = field(default_factory=list)
    parents: dict[int, list[ParentLink]] = field(default_factory=dict)
    resolver: Callable[[Any], Sequence[ParentLink]] | None = None

    def link(self, child: Any, edge: str, parent: Any) -> None:
        """Add a structural edge ``child --edge--> parent``."""
        self.parents.setdefault(id(child), []).append(ParentLink(edge, parent))

    def parents_of(self, entity: Any) -> Sequence[ParentLink]:
        if self.resolver is not None:
            return self.resolver(entity)
        return self.parents.get(id(entity), [])
