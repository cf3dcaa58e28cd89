"""
API Faker — Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the routing layer and the store.
Why:   Each failure class maps to exactly one HTTP status, so the global
       handler in main.py renders every error the same way:
       {"error": "<message>"} with the class's status code.
How:   Every exception carries a message, an optional context dict (logged,
       never returned) and a status_code class attribute.

Exception Hierarchy:
    ApiFakerError (base)                  → 500
    ├── BadRequestError                   → 400 Bad Request
    ├── ResourceNotFoundError             → 404 Not Found
    ├── ReadOnlyError                     → 403 Forbidden
    └── StorageError                      → raised by the Database only
        ├── ConflictError                 (explicit duplicate id in strict mode)
        ├── StorageNotFoundError          (operation on an absent collection)
        ├── InvalidDataError              (wrong shape for the operation)
        └── PersistenceError              (could not read/write the JSON file)

StorageError never reaches the client with its own status: ResourceService
catches the whole family at the storage boundary and re-raises it as
BadRequestError carrying the storage message.
"""

from typing import Any, Dict, Optional


class ApiFakerError(Exception):
    """
    Base exception for all API Faker application errors.

    Attributes:
        message:  User-facing error description (returned as {"error": message})
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class BadRequestError(ApiFakerError):
    """
    The request cannot be applied as sent.

    When:  Body is not a JSON object, PUT/PATCH aimed at a collection,
           or the store rejected the write.
    HTTP:  400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Bad request",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ResourceNotFoundError(ApiFakerError):
    """
    A resource, collection or item is absent from the store.

    The message is fully formed by the caller, since the three not-found
    templates differ ("Resource ...", "Collection ...", "Item with id ...").
    HTTP:  404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        message: str = "Not found",
        resource: Optional[str] = None,
        item_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if resource is not None:
            ctx["resource"] = resource
        if item_id is not None:
            ctx["item_id"] = item_id
        super().__init__(message=message, context=ctx)


class ReadOnlyError(ApiFakerError):
    """Write attempted while the router is configured read-only. HTTP 403."""

    status_code = 403

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Read-only mode enabled", context=context)


# ══════════════════════════════════════════════════════════════════════════
# Storage Errors — raised by the Database, downgraded to 400 by the router
# ══════════════════════════════════════════════════════════════════════════


class StorageError(ApiFakerError):
    """Base class for every failure the Database reports."""

    def __init__(
        self,
        message: str = "Storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ConflictError(StorageError):
    """An explicitly supplied identifier already exists (strict ids only)."""

    def __init__(
        self,
        resource: str,
        item_id: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx.update({"resource": resource, "item_id": item_id})
        super().__init__(
            message=f"Item with id '{item_id}' already exists in '{resource}'",
            context=ctx,
        )


class StorageNotFoundError(StorageError):
    """A mutation targeted a name that holds no collection."""


class InvalidDataError(StorageError):
    """The value handed to the store has the wrong shape for the operation."""


class PersistenceError(StorageError):
    """
    The JSON document could not be read or written.

    The OS error text is kept in context for the logs; the message stays generic.
    """

    def __init__(
        self,
        message: str = "Failed to persist database",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
