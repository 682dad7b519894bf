from typing import Any, Dict, List, Optional, Type

from bson import ObjectId
from pymongo import ReturnDocument
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError

from app.database.backends.base import Repository
from app.database.validation import duplicate_error
from app.utils.logger_utils import logger


def _object_id(doc_id: str) -> Optional[ObjectId]:
    if isinstance(doc_id, ObjectId):
        return doc_id
    if doc_id is None or not ObjectId.is_valid(str(doc_id)):
        return None
    return ObjectId(str(doc_id))


def _out(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if doc is None:
        return None
    doc["_id"] = str(doc["_id"])
    return doc


def _duplicate(e: DuplicateKeyError):
    key_value = (e.details or {}).get("keyValue") or {}
    field_name = next(iter(key_value), "value")
    return duplicate_error(field_name)


class MongoRepository(Repository):
    """Repository over one Motor collection. Ids are exposed as strings."""

    def __init__(self, database, name: str, model: Type[BaseModel]):
        super().__init__(name, model)
        self._collection = database[name]

    def _query(self, query: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        query = dict(query or {})
        if "_id" in query and isinstance(query["_id"], str):
            query["_id"] = _object_id(query["_id"])
        return query

    async def _insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        try:
            result = await self._collection.insert_one(doc)
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on {self.name}: {e.details}")
            raise _duplicate(e)
        doc["_id"] = str(result.inserted_id)
        return doc

    async def _update(self, doc_id: str, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        oid = _object_id(doc_id)
        if oid is None:
            return None
        try:
            doc = await self._collection.find_one_and_update(
                {"_id": oid}, update, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError as e:
            logger.warning(f"Duplicate key on {self.name}: {e.details}")
            raise _duplicate(e)
        return _out(doc)

    async def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        oid = _object_id(doc_id)
        if oid is None:
            return None
        return _out(await self._collection.find_one({"_id": oid}))

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        return _out(await self._collection.find_one(self._query(query)))

    async def find_many(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        cursor = self._collection.find(self._query(query))
        items: List[Dict[str, Any]] = []
        async for doc in cursor:
            items.append(_out(doc))
        return items

    async def delete_by_id(self, doc_id: str) -> bool:
        oid = _object_id(doc_id)
        if oid is None:
            return False
        result = await self._collection.delete_one({"_id": oid})
        return result.deleted_count > 0
