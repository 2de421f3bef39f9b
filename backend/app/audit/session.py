"""SQLAlchemy adapter: build a ChangeSnapshot from a flushing Session."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.orm import (
    InstanceState,
    Mapper,
    RelationshipDirection,
    RelationshipProperty,
    Session,
)

from app.audit.snapshot import Auditable, ParentLink

logger = logging.getLogger(__name__)


def is_auditable(obj: Any) -> bool:
    return obj is not None and isinstance(obj, Auditable)


class SessionSnapshot:
    """ChangeSnapshot over the pending state of a SQLAlchemy Session.

    ``changed`` holds auditable objects that are new, followed by those
    with modified column attributes. Objects whose only change is a
    collection (e.g. an item appended to ``order.items``) are not direct
    changes; the appended child is, and bubbles on its own.
    """

    def __init__(self, session: Session, changed: Sequence[Any]) -> None:
        self.session = session
        self._changed = list(changed)

    @classmethod
    def from_session(cls, session: Session) -> SessionSnapshot:
        deleted = {id(obj) for obj in session.deleted}
        changed = [obj for obj in session.new if is_auditable(obj)]
        changed.extend(
            obj
            for obj in session.dirty
            if is_auditable(obj)
            and id(obj) not in deleted
            and session.is_modified(obj, include_collections=False)
        )
        return cls(session, changed)

    @property
    def changed(self) -> list[Any]:
        return self._changed

    def parents_of(self, entity: Any) -> list[ParentLink]:
        state = inspect(entity)
        mapper: Mapper[Any] = state.mapper
        links = []
        for rel in mapper.relationships:
            if rel.direction is not RelationshipDirection.MANYTOONE:
                continue
            if self._foreign_key_moved(state, mapper, rel):
                # The loaded relationship still points at the old parent
                parent = self._load_by_foreign_key(entity, mapper, rel)
            else:
                parent = getattr(entity, rel.key)
                if parent is None:
                    parent = self._load_by_foreign_key(entity, mapper, rel)
            if is_auditable(parent):
                links.append(ParentLink(rel.key, parent))
        return links

    @staticmethod
    def _foreign_key_moved(
        state: InstanceState[Any], mapper: Mapper[Any], rel: RelationshipProperty[Any]
    ) -> bool:
        """True when FK columns changed but the relationship was not reassigned.

        Assigning ``item.order = other`` leaves ``order_id`` stale until the
        flush, so a changed relationship attribute always wins.
        """
        if state.attrs[rel.key].history.has_changes():
            return False
        return any(
            state.attrs[mapper.get_property_by_column(col).key].history.has_changes()
            for col, _ in rel.local_remote_pairs
        )

    def _load_by_foreign_key(
        self, entity: Any, mapper: Mapper[Any], rel: RelationshipProperty[Any]
    ) -> Any:
        """Resolve a many-to-one target from foreign key columns alone.

        Pending objects created with ``order_id=...`` but no ``order`` do not
        lazy-load their parent, so look it up in the identity map / database.
        """
        target = rel.mapper
        ident_by_column = {}
        for local_col, remote_col in rel.local_remote_pairs:
            prop = mapper.get_property_by_column(local_col)
            value = getattr(entity, prop.key)
            if value is None:
                return None
            ident_by_column[remote_col] = value

        pk_columns = target.primary_key
        if any(col not in ident_by_column for col in pk_columns):
            logger.debug(
                "Skipping %s.%s: foreign key does not cover the target primary key",
                mapper.class_.__name__,
                rel.key,
            )
            return None

        ident = tuple(ident_by_column[col] for col in pk_columns)
        return self.session.get(target.class_, ident[0] if len(ident) == 1 else ident)
