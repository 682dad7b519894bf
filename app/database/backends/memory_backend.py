"""
In-process fallback backend.

Documents live in an ordered list with an id -> position index. Ids are
sequential strings. Callers always get deep copies, so mutating a returned
document never changes the stored one. There are no locks: two requests
updating the same record are last-writer-wins.
"""
import copy
import itertools
import re
from typing import Any, Dict, List, Optional, Type

from pydantic import BaseModel

from app.database.backends.base import Repository
from app.database.validation import duplicate_error, unique_fields


def _matches_value(actual: Any, expected: Any) -> bool:
    if isinstance(expected, dict) and any(key.startswith("$") for key in expected):
        return _matches_operators(actual, expected)
    if isinstance(actual, list) and not isinstance(expected, list):
        return expected in actual
    return actual == expected


def _matches_operators(actual: Any, condition: Dict[str, Any]) -> bool:
    for operator, operand in condition.items():
        if operator == "$in":
            values = actual if isinstance(actual, list) else [actual]
            if not any(value in operand for value in values):
                return False
        elif operator == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            values = actual if isinstance(actual, list) else [actual]
            if not any(isinstance(value, str) and re.search(operand, value, flags) for value in values):
                return False
        elif operator == "$options":
            continue
        else:
            raise ValueError(f"Unsupported query operator: {operator}")
    return True


def matches(doc: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    for key, expected in (query or {}).items():
        if key == "$or":
            if not any(matches(doc, branch) for branch in expected):
                return False
        elif not _matches_value(doc.get(key), expected):
            return False
    return True


def _pull(items: List[Any], condition: Any) -> List[Any]:
    if isinstance(condition, dict):
        return [item for item in items
                if not (isinstance(item, dict) and all(item.get(k) == v for k, v in condition.items()))]
    return [item for item in items if item != condition]


def apply_update(doc: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    for operator, fields in update.items():
        for name, value in fields.items():
            if operator == "$set":
                doc[name] = value
            elif operator == "$inc":
                doc[name] = doc.get(name, 0) + value
            elif operator == "$push":
                doc.setdefault(name, []).append(value)
            elif operator == "$pull":
                doc[name] = _pull(doc.get(name, []), value)
            else:
                raise ValueError(f"Unsupported update operator: {operator}")
    return doc


class MemoryRepository(Repository):

    def __init__(self, name: str, model: Type[BaseModel]):
        super().__init__(name, model)
        self._unique = unique_fields(model)
        self._items: List[Dict[str, Any]] = []
        self._index: Dict[str, int] = {}
        self._ids = itertools.count(1)

    def _reindex(self) -> None:
        self._index = {item["_id"]: position for position, item in enumerate(self._items)}

    def _check_unique(self, doc: Dict[str, Any], exclude_id: Optional[str] = None) -> None:
        for name in self._unique:
            if name not in doc:
                continue
            for item in self._items:
                if item["_id"] != exclude_id and item.get(name) == doc[name]:
                    raise duplicate_error(name)

    async def _insert(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        self._check_unique(doc)
        stored = copy.deepcopy(doc)
        stored["_id"] = str(next(self._ids))
        self._items.append(stored)
        self._index[stored["_id"]] = len(self._items) - 1
        return copy.deepcopy(stored)

    async def _update(self, doc_id: str, update: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        position = self._index.get(str(doc_id))
        if position is None:
            return None
        if "$set" in update:
            self._check_unique(update["$set"], exclude_id=str(doc_id))
        updated = apply_update(copy.deepcopy(self._items[position]), copy.deepcopy(update))
        self._items[position] = updated
        return copy.deepcopy(updated)

    async def find_by_id(self, doc_id: str) -> Optional[Dict[str, Any]]:
        position = self._index.get(str(doc_id))
        if position is None:
            return None
        return copy.deepcopy(self._items[position])

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for item in self._items:
            if matches(item, query):
                return copy.deepcopy(item)
        return None

    async def find_many(self, query: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        return [copy.deepcopy(item) for item in self._items if matches(item, query)]

    async def delete_by_id(self, doc_id: str) -> bool:
        position = self._index.get(str(doc_id))
        if position is None:
            return False
        del self._items[position]
        self._reindex()
        return True

    def __len__(self) -> int:
        return len(self._items)
