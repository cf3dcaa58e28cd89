"""
API Faker — JSON Document Store
=================================

What:  The storage collaborator behind the resource router: one JSON object
       whose top-level keys are resources (arrays are collections, anything
       else is a singular resource).
Why:   Keeps every persistence concern (file I/O, id generation, locking)
       out of the routing layer, which only sees the primitives below.
How:   The document lives in memory; every successful mutation writes the
       whole document to disk atomically (temp file + os.replace).
Who:   Created by the app factory, consumed by ResourceService.
When:  Loaded once during startup (lifespan), mutated per write request.

Storage Contract:
    Reads (synchronous, return deep copies):
        get_data()                  → whole document
        get_collection(name)        → value at name, or None if absent
        is_collection(name)         → True iff the value is a list
        get_by_id(name, id)         → matching item, or None
    Writes (coroutines, serialized by one asyncio.Lock):
        create(name, obj)           → created item (collection created if absent)
        update(name, id, obj)       → replaced item, or None if id not found
        patch(name, id, partial)    → merged item, or None if id not found
        update_singular(name, obj)  → stored object
        delete(name, id)            → True if an item was removed

    Writes raise StorageError subclasses only (see exceptions.py).

Concurrency Model:
    The lock makes each write a critical section, so two concurrent creates
    always see each other's ids. Reads are not locked: between awaits the
    document is never half-updated because the new document is swapped in
    with a single assignment after it has been persisted.
"""

import asyncio
import copy
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
import aiofiles.os

from apifaker.exceptions import (
    ConflictError,
    InvalidDataError,
    PersistenceError,
    StorageNotFoundError,
)

logger = logging.getLogger(__name__)

JsonObject = Dict[str, Any]
ItemId = Union[str, int, float]


def id_to_str(value: Any) -> str:
    """
    Canonical string form of an identifier.

    Identifiers are compared as strings whatever their JSON type, so
    7, 7.0 and "7" all address the same item.
    """
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class Database:
    """
    In-memory JSON document with optional file persistence.

    Args:
        path:        JSON file backing the store; None keeps it in memory only.
        id_field:    Identifier key for collection items.
        strict_ids:  Raise ConflictError for an explicit duplicate id instead
                     of assigning a fresh one.
        data:        Initial document (used when there is no file, or before init()).
    """

    def __init__(
        self,
        path: Optional[Union[str, Path]] = None,
        id_field: str = "id",
        strict_ids: bool = False,
        data: Optional[JsonObject] = None,
    ):
        self.path = Path(path) if path else None
        self.id_field = id_field
        self.strict_ids = strict_ids
        self._data: JsonObject = copy.deepcopy(data) if data is not None else {}
        self._lock = asyncio.Lock()

    # ── Lifecycle ─────────────────────────────────────────────────────────

    async def init(self) -> None:
        """
        Load the document from disk, creating the file with {} when absent.

        Raises:
            InvalidDataError: the file is not JSON, or its top level is not an object.
            PersistenceError: the file could not be read or created.
        """
        if self.path is None:
            logger.info("Database running in memory (%d resources)", len(self._data))
            return

        if not self.path.exists():
            logger.info("Database file %s not found, creating it", self.path)
            async with self._lock:
                await self._persist(self._data)
            return

        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except OSError as e:
            logger.error("Failed to read database file %s: %s", self.path, str(e))
            raise PersistenceError(
                message="Failed to load database",
                context={"path": str(self.path), "os_error": str(e)},
            ) from e

        try:
            loaded = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as e:
            raise InvalidDataError(
                message=f"Database file '{self.path}' is not valid JSON: {e.msg}",
                context={"path": str(self.path), "line": e.lineno},
            ) from e

        if not isinstance(loaded, dict):
            raise InvalidDataError(
                message=f"Database file '{self.path}' must contain a JSON object",
                context={"path": str(self.path)},
            )

        self._data = loaded
        logger.info("Loaded %d resources from %s", len(self._data), self.path)

    async def _persist(self, document: JsonObject) -> None:
        """Write the document atomically. No-op for in-memory stores."""
        if self.path is None:
            return

        payload = json.dumps(document, indent=2, ensure_ascii=False)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(payload)
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Failed to write database file %s: %s", self.path, str(e))
            await self._discard(tmp_path)
            raise PersistenceError(
                context={"path": str(self.path), "os_error": str(e)},
            ) from e

    @staticmethod
    async def _discard(path: Path) -> None:
        """Best-effort removal of a leftover temp file."""
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temp file %s: %s", path, str(e))

    async def _commit(self, name: str, value: Any) -> None:
        """Persist a copy of the document with `name` set, then swap it in."""
        document = dict(self._data)
        document[name] = value
        await self._persist(document)
        self._data = document

    # ── Reads ─────────────────────────────────────────────────────────────

    def get_data(self) -> JsonObject:
        return copy.deepcopy(self._data)

    def get_collection(self, name: str) -> Any:
        """Value stored at `name` (list, object or scalar), or None if absent."""
        if name not in self._data:
            return None
        return copy.deepcopy(self._data[name])

    def has(self, name: str) -> bool:
        return name in self._data

    def is_collection(self, name: str) -> bool:
        return isinstance(self._data.get(name), list)

    def get_by_id(self, name: str, item_id: ItemId) -> Optional[JsonObject]:
        items = self._data.get(name)
        if not isinstance(items, list):
            return None
        index = self._find_index(items, item_id)
        if index is None:
            return None
        return copy.deepcopy(items[index])

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(self, name: str, obj: JsonObject) -> JsonObject:
        """
        Append an item to collection `name`, creating the collection if needed.

        A missing (or null) id, or one that collides with an existing item,
        is replaced by a freshly generated id. With strict_ids a collision
        raises ConflictError instead.
        """
        self._require_object(obj)

        async with self._lock:
            if name in self._data and not isinstance(self._data[name], list):
                raise InvalidDataError(
                    message=f"Resource '{name}' is not a collection",
                    context={"resource": name},
                )
            items: List[Any] = list(self._data.get(name, []))

            item = copy.deepcopy(obj)
            supplied = item.get(self.id_field)
            if supplied is None:
                item[self.id_field] = self._generate_id(items)
            else:
                self._require_valid_id(supplied)
                if self._find_index(items, supplied) is not None:
                    if self.strict_ids:
                        raise ConflictError(resource=name, item_id=id_to_str(supplied))
                    new_id = self._generate_id(items)
                    logger.debug(
                        "Id %s already used in '%s', assigned %s",
                        id_to_str(supplied), name, new_id,
                    )
                    item[self.id_field] = new_id

            items.append(item)
            await self._commit(name, items)

        logger.debug("Created item %s in '%s'", id_to_str(item[self.id_field]), name)
        return copy.deepcopy(item)

    async def update(
        self, name: str, item_id: ItemId, obj: JsonObject
    ) -> Optional[JsonObject]:
        """Replace an item wholesale; its identifier and position are kept."""
        self._require_object(obj)

        async with self._lock:
            items = self._collection_for_write(name)
            index = self._find_index(items, item_id)
            if index is None:
                return None

            current_id = items[index][self.id_field]
            replacement = {self.id_field: current_id}
            replacement.update(
                (key, copy.deepcopy(value))
                for key, value in obj.items()
                if key != self.id_field
            )
            items[index] = replacement
            await self._commit(name, items)

        return copy.deepcopy(replacement)

    async def patch(
        self, name: str, item_id: ItemId, partial: JsonObject
    ) -> Optional[JsonObject]:
        """Shallow-merge `partial` into an item; its identifier is kept."""
        self._require_object(partial)

        async with self._lock:
            items = self._collection_for_write(name)
            index = self._find_index(items, item_id)
            if index is None:
                return None

            current = items[index]
            merged = {**current, **copy.deepcopy(partial)}
            merged[self.id_field] = current[self.id_field]
            items[index] = merged
            await self._commit(name, items)

        return copy.deepcopy(merged)

    async def update_singular(self, name: str, obj: JsonObject) -> JsonObject:
        """Store `obj` as the whole value of a singular resource."""
        self._require_object(obj)

        async with self._lock:
            if self.is_collection(name):
                raise InvalidDataError(
                    message=f"Resource '{name}' is a collection",
                    context={"resource": name},
                )
            value = copy.deepcopy(obj)
            await self._commit(name, value)

        return copy.deepcopy(value)

    async def delete(self, name: str, item_id: ItemId) -> bool:
        async with self._lock:
            items = self._data.get(name)
            if not isinstance(items, list):
                return False
            index = self._find_index(items, item_id)
            if index is None:
                return False

            remaining = items[:index] + items[index + 1:]
            await self._commit(name, remaining)

        logger.debug("Deleted item %s from '%s'", id_to_str(item_id), name)
        return True

    # ── Helpers ───────────────────────────────────────────────────────────

    def _collection_for_write(self, name: str) -> List[Any]:
        """Shallow copy of the collection list, so a failed write leaves the store intact."""
        items = self._data.get(name)
        if not isinstance(items, list):
            raise StorageNotFoundError(
                message=f"Collection '{name}' not found",
                context={"resource": name},
            )
        return list(items)

    def _find_index(self, items: List[Any], item_id: ItemId) -> Optional[int]:
        wanted = id_to_str(item_id)
        for index, item in enumerate(items):
            if not isinstance(item, dict) or self.id_field not in item:
                continue
            if item[self.id_field] is not None and id_to_str(item[self.id_field]) == wanted:
                return index
        return None

    def _generate_id(self, items: List[Any]) -> Union[int, str]:
        """
        Next integer id when every existing id is an integer, else a UUID4 hex.

        An empty collection starts at 1.
        """
        ids = [
            item[self.id_field]
            for item in items
            if isinstance(item, dict) and item.get(self.id_field) is not None
        ]
        if all(isinstance(i, int) and not isinstance(i, bool) for i in ids):
            return max(ids, default=0) + 1
        return uuid.uuid4().hex

    def _require_valid_id(self, value: Any) -> None:
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise InvalidDataError(
                message=f"Field '{self.id_field}' must be a string or a number",
                context={"value": repr(value)},
            )

    @staticmethod
    def _require_object(obj: Any) -> None:
        if not isinstance(obj, dict):
            raise InvalidDataError(message="Value must be a JSON object")
