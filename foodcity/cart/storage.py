from typing import Dict, List, Protocol

import structlog
from sqlalchemy.orm import Session

from foodcity.models.cart import CartSnapshot

logger = structlog.get_logger()

SCHEMA_VERSION = 1


class CartStorage(Protocol):
    def load(self, key: str) -> List[dict]:
        ...

    def save(self, key: str, items: List[dict]) -> None:
        ...


class InMemoryCartStorage:
    """Dict-backed storage, used for anonymous carts and tests."""

    def __init__(self):
        self._data: Dict[str, List[dict]] = {}

    def load(self, key: str) -> List[dict]:
        return [dict(item) for item in self._data.get(key, [])]

    def save(self, key: str, items: List[dict]) -> None:
        self._data[key] = [dict(item) for item in items]


class SqlCartStorage:
    """Persists each storage key as one ``cart_snapshots`` row per user."""

    def __init__(self, db: Session, user_id: int):
        self.db = db
        self.user_id = user_id

    def _row(self, key: str):
        return (
            self.db.query(CartSnapshot)
            .filter(CartSnapshot.user_id == self.user_id, CartSnapshot.storage_key == key)
            .first()
        )

    def load(self, key: str) -> List[dict]:
        row = self._row(key)
        if not row:
            return []
        if row.schema_version != SCHEMA_VERSION:
            logger.warning(
                "cart_snapshot_version_unsupported",
                user_id=self.user_id,
                storage_key=key,
                schema_version=row.schema_version,
            )
            return []
        return list(row.items or [])

    def save(self, key: str, items: List[dict]) -> None:
        try:
            row = self._row(key)
            if row is None:
                row = CartSnapshot(user_id=self.user_id, storage_key=key)
                self.db.add(row)
            row.schema_version = SCHEMA_VERSION
            row.items = items
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
