"""Propagation engine: stamp changed entities and bubble to ancestors.

Pure in-memory computation with no I/O of its own. Given a ChangeSnapshot and
a BubblingPolicy it:

1. Stamps every directly changed entity (``last_modified`` and
   ``last_modified_with_dependents``) with the run timestamp.
2. Walks upward from each changed entity along policy-permitted edges,
   raising ``last_modified_with_dependents`` on ancestors that are older
   than the run timestamp.

The walk is bounded by a visited set local to the call, so cycles and
diamonds terminate after touching each reachable ancestor at most once.
Ancestors already at or past the timestamp are neither written nor walked
through, which makes re-running with the same timestamp a no-op.

Which changed entity reaches a shared ancestor first depends on snapshot
order. Only the write count differs; the final timestamps do not.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.audit.policy import BubblingPolicy, kind_of
from app.audit.snapshot import ChangeSnapshot, ParentLink

logger = logging.getLogger(__name__)


@dataclass
class PropagationResult:
    """Outcome of one ``apply`` run."""

    timestamp: datetime
    changed: list[Any] = field(default_factory=list)
    bubbled: list[Any] = field(default_factory=list)

    @property
    def to_persist(self) -> list[Any]:
        """Changed plus bubbled entities, deduplicated by identity."""
        return _unique([*self.changed, *self.bubbled])


def _unique(entities: Iterable[Any]) -> list[Any]:
    seen: set[int] = set()
    out = []
    for entity in entities:
        if id(entity) not in seen:
            seen.add(id(entity))
            out.append(entity)
    return out


class PropagationEngine:
    """Computes direct and bubbled audit timestamps for a commit."""

    def apply(
        self,
        snapshot: ChangeSnapshot,
        policy: BubblingPolicy,
        timestamp: datetime,
    ) -> PropagationResult:
        """Stamp the snapshot's changed entities and bubble to their ancestors.

        Args:
            snapshot: Changed entities plus parent navigation.
            policy: Allowed (child kind, parent kind) edges.
            timestamp: The commit timestamp.

        Returns:
            PropagationResult; ``to_persist`` lists every entity the storage
            layer must write in this commit.
        """
        changed = _unique(snapshot.changed)

        for entity in changed:
            entity.last_modified = timestamp
            entity.last_modified_with_dependents = timestamp

        bubbled = self.bubble(changed, snapshot, policy, timestamp)

        logger.debug(
            "Audit run at %s: %d changed, %d bubbled",
            timestamp.isoformat(),
            len(changed),
            len(bubbled),
        )
        return PropagationResult(timestamp=timestamp, changed=changed, bubbled=bubbled)

    def bubble(
        self,
        entities: Iterable[Any],
        snapshot: ChangeSnapshot,
        policy: BubblingPolicy,
        timestamp: datetime,
    ) -> list[Any]:
        """Raise ancestors' dependents timestamp to ``timestamp``.

        Only the upward pass: ``entities`` themselves are not stamped.
        Returns the ancestors written, excluding members of ``entities``.
        """
        entities = list(entities)
        origin = {id(e) for e in entities}
        visited: set[int] = set()
        bubbled: list[Any] = []

        for entity in entities:
            if id(entity) in visited:
                continue
            visited.add(id(entity))

            # Depth-first, parents in the order parents_of reports them.
            stack: list[tuple[Any, Iterator[ParentLink]]] = [
                (entity, iter(snapshot.parents_of(entity)))
            ]
            while stack:
                child, links = stack[-1]
                link = next(links, None)
                if link is None:
                    stack.pop()
                    continue

                parent = link.parent
                if parent is None:
                    continue
                if not policy.allows(kind_of(child), kind_of(parent)):
                    continue

                current = parent.last_modified_with_dependents
                if current is not None and current >= timestamp:
                    continue
                _check_invariant(parent, link.edge)

                parent.last_modified_with_dependents = timestamp
                if id(parent) not in origin:
                    bubbled.append(parent)

                if id(parent) in visited:
                    continue
                visited.add(id(parent))
                stack.append((parent, iter(snapshot.parents_of(parent))))

        return bubbled


def _check_invariant(entity: Any, edge: str) -> None:
    """Warn when an entity's dependents stamp lags its direct stamp."""
    direct = entity.last_modified
    dependents = entity.last_modified_with_dependents
    if direct is not None and dependents is not None and dependents < direct:
        logger.warning(
            "%s reached via %r has last_modified_with_dependents (%s) "
            "older than last_modified (%s)",
            kind_of(entity),
            edge,
            dependents.isoformat(),
            direct.isoformat(),
        )
