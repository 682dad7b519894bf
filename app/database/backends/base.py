from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from app.database.validation import validate_document, validate_update


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Repository(ABC):
    """
    Storage contract for one collection.

    Subclasses only implement the raw ``_insert`` / ``_update`` primitives and
    the lookups; validation against the bound document model and timestamps are
    applied here so every backend behaves the same way.

    Queries are MongoDB-style documents. Supported operators: field equality
    (a scalar also matches an array element), ``$in``, ``$or`` and ``$regex``
    with ``$options``. Updates support ``$set``, ``$inc``, ``$push`` and
    ``$pull``.
    """

    def __init__(self, name: str, model: Type[BaseModel]):
        self.name = name
        self.model = model

    async def create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        doc = validate_document(self.model, doc)
        now = utc_now()
        doc.setdefault("created_at", now)
        doc["updated_at"] = now
        return await self._insert(doc)

    async def update_by_id(self, doc_id: str, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        update = validate_update(self.model, update)
        update.setdefault("$set", {})["updated_at"] = utc_now()
        return await self._update(doc_id, update)

    @abstractmethod
    async def _insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def _update(self, doc_id: str, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    async def find_many(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    async def delete_by_id(self, doc_id: str) -> bool:
        ...
