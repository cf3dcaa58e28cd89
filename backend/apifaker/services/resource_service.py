"""
API Faker — Resource Service (Routing Semantics)
==================================================

What:  Decides, for every verb/path pair, which storage primitive runs and
       what comes back, including the ambiguous cases (POST to a singular
       resource, PATCH on a singular resource, read-only mode).
Why:   Keeps the rules independent of HTTP so they can be tested with a
       mocked store; the route module only translates results to responses.
How:   Each method classifies the target once, applies its guards, calls the
       store, and either returns a JSON value or raises an ApiFakerError
       that the global handler renders as {"error": message}.

Guard order for every write:
    1. read-only           → ReadOnlyError (403), before anything else
    2. body is an object   → BadRequestError (400), before any storage call
    3. resource kind       → BadRequestError (400) / ResourceNotFoundError (404)
    4. storage call        → StorageError downgraded to BadRequestError (400)

Concurrency:
    The service keeps no per-request state. Singular PATCH is a
    read → merge → write sequence over two separate store calls and is not
    atomic: two concurrent PATCHes on one singular resource may lose an update.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional

from apifaker.config import RouterOptions
from apifaker.database import Database
from apifaker.exceptions import (
    BadRequestError,
    ReadOnlyError,
    ResourceNotFoundError,
    StorageError,
)
from apifaker.services.resource_view import (
    Collection,
    Missing,
    Singular,
    classify,
    shallow_merge,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostOutcome:
    """Result of POST /:resource: `created` is False when a singular resource was replaced."""

    body: Dict[str, Any]
    created: bool


def resource_not_found(name: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(f"Resource '{name}' not found", resource=name)


def collection_not_found(name: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(f"Collection '{name}' not found", resource=name)


def item_not_found(name: str, item_id: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(
        f"Item with id '{item_id}' not found in '{name}'",
        resource=name,
        item_id=item_id,
    )


class ResourceService:
    """
    CRUD semantics over named collections and singular resources.

    Args:
        database: Store implementing the Database contract.
        options:  Router options; id_field must match the store's.
    """

    def __init__(self, database: Database, options: Optional[RouterOptions] = None):
        self.database = database
        self.options = options or RouterOptions(id_field=database.id_field)

    @property
    def read_only(self) -> bool:
        return self.options.read_only

    # ── Guards ────────────────────────────────────────────────────────────

    def _ensure_writable(self) -> None:
        if self.options.read_only:
            raise ReadOnlyError()

    @staticmethod
    def _require_object(body: Any) -> Dict[str, Any]:
        if not isinstance(body, dict):
            raise BadRequestError(
                "Request body must be a JSON object",
                context={"received": type(body).__name__},
            )
        return body

    def _guard_write(self, body: Any) -> Dict[str, Any]:
        self._ensure_writable()
        return self._require_object(body)

    @contextmanager
    def _storage_boundary(self, operation: str, name: str) -> Iterator[None]:
        """Every StorageError leaving the store becomes a 400 with its message."""
        try:
            yield
        except StorageError as e:
            logger.warning(
                "Storage rejected %s on '%s': %s | Context: %s",
                operation, name, e.message, e.context,
            )
            raise BadRequestError(
                e.message or "Unknown error",
                context={"operation": operation, "resource": name, **e.context},
            ) from e

    # ── Reads ─────────────────────────────────────────────────────────────

    def get_database(self) -> Dict[str, Any]:
        """GET /db: the whole store."""
        return self.database.get_data()

    def get_resource(self, name: str) -> Any:
        """GET /:resource: collection items or the singular value, as stored."""
        view = classify(self.database, name)
        if isinstance(view, Missing):
            raise resource_not_found(name)
        if isinstance(view, Collection):
            return view.items
        return view.value

    def get_item(self, name: str, item_id: str) -> Dict[str, Any]:
        """GET /:resource/:id."""
        if not isinstance(classify(self.database, name), Collection):
            raise collection_not_found(name)

        item = self.database.get_by_id(name, item_id)
        if item is None:
            raise item_not_found(name, item_id)
        return item

    # ── Writes ────────────────────────────────────────────────────────────

    async def post(self, name: str, body: Any) -> PostOutcome:
        """
        POST /:resource.

        An existing singular resource is replaced (200). Anything else,
        including an absent name, gets a new collection item (201); the store
        assigns an id when the body has none or a colliding one.
        """
        data = self._guard_write(body)
        view = classify(self.database, name)

        with self._storage_boundary("create", name):
            if isinstance(view, Singular):
                updated = await self.database.update_singular(name, data)
                logger.info("Replaced singular resource '%s' via POST", name)
                return PostOutcome(body=updated, created=False)

            created = await self.database.create(name, data)

        logger.info(
            "Created item %s in '%s'", created.get(self.options.id_field), name
        )
        return PostOutcome(body=created, created=True)

    async def replace_item(self, name: str, item_id: str, body: Any) -> Dict[str, Any]:
        """PUT /:resource/:id: full replace, identifier preserved."""
        data = self._guard_write(body)
        if not isinstance(classify(self.database, name), Collection):
            raise collection_not_found(name)

        with self._storage_boundary("update", name):
            updated = await self.database.update(name, item_id, data)

        if updated is None:
            raise item_not_found(name, item_id)
        return updated

    async def patch_item(self, name: str, item_id: str, body: Any) -> Dict[str, Any]:
        """PATCH /:resource/:id: shallow merge, identifier preserved."""
        data = self._guard_write(body)
        if not isinstance(classify(self.database, name), Collection):
            raise collection_not_found(name)

        with self._storage_boundary("patch", name):
            patched = await self.database.patch(name, item_id, data)

        if patched is None:
            raise item_not_found(name, item_id)
        return patched

    async def replace_singular(self, name: str, body: Any) -> Dict[str, Any]:
        """PUT /:resource: singular resources only; creates the name if absent."""
        data = self._guard_write(body)
        if isinstance(classify(self.database, name), Collection):
            raise BadRequestError(
                f"Cannot PUT to collection '{name}'. Use POST or PUT /{name}/:id",
                context={"resource": name},
            )

        with self._storage_boundary("update_singular", name):
            return await self.database.update_singular(name, data)

    async def patch_singular(self, name: str, body: Any) -> Dict[str, Any]:
        """
        PATCH /:resource: read the current object, merge, write it back whole.

        The current value must exist and be an object; a scalar singular
        value answers 404 just like an absent name.
        """
        data = self._guard_write(body)
        view = classify(self.database, name)
        if isinstance(view, Collection):
            raise BadRequestError(
                f"Cannot PATCH collection '{name}'. Use PATCH /{name}/:id",
                context={"resource": name},
            )
        if not (isinstance(view, Singular) and view.is_object):
            raise resource_not_found(name)

        merged = shallow_merge(view.value, data)
        with self._storage_boundary("update_singular", name):
            return await self.database.update_singular(name, merged)

    async def delete_item(self, name: str, item_id: str) -> None:
        """DELETE /:resource/:id."""
        self._ensure_writable()
        if not isinstance(classify(self.database, name), Collection):
            raise collection_not_found(name)

        with self._storage_boundary("delete", name):
            deleted = await self.database.delete(name, item_id)

        if not deleted:
            raise item_not_found(name, item_id)
        logger.info("Deleted item %s from '%s'", item_id, name)
