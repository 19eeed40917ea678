"""
Shared plumbing for the SQLAlchemy repositories.

Every state transition in the core goes through ``compare_and_set``: a
single conditional UPDATE that only matches the row while each guarded
column still holds one of the expected values. The affected row count
tells the caller whether it won the transition, which gives
at-most-one-winner semantics under concurrent requests without locks.
Decisions that read several rows before writing (the completion
handshake, the pending-proposal cap) take a row lock first.
"""

import abc
import enum
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.orm import Session


def _raw(value: Any) -> Any:
    if isinstance(value, enum.Enum):
        return value.value
    return value


class Repository(abc.ABC):
    """Interface shared by every aggregate repository."""

    @abc.abstractmethod
    def add(self, entity):
        ...

    @abc.abstractmethod
    def get(self, entity_id: int):
        ...

    @abc.abstractmethod
    def save(self, entity):
        ...

    @abc.abstractmethod
    def compare_and_set(
        self,
        entity_id: int,
        expected: Dict[str, Iterable[Any]],
        **changes: Any,
    ) -> bool:
        """Apply ``changes`` only if every ``expected`` column still matches."""


class SqlRepository(Repository):
    model = None

    def __init__(self, db: Session):
        self.db = db

    def add(self, entity):
        self.db.add(entity)
        self.db.flush()
        return entity

    def get(self, entity_id: int) -> Optional[Any]:
        return self.db.get(self.model, entity_id)

    def save(self, entity):
        self.db.add(entity)
        self.db.flush()
        return entity

    def compare_and_set(self, entity_id, expected, **changes) -> bool:
        query = self.db.query(self.model).filter(self.model.id == entity_id)
        for column, allowed in expected.items():
            query = query.filter(
                getattr(self.model, column).in_([_raw(v) for v in allowed])
            )
        updated = query.update(
            {key: _raw(value) for key, value in changes.items()},
            synchronize_session="fetch",
        )
        return updated == 1
